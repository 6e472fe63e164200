"""
Contact extraction - pulls name, email and phone out of resume text.

The provider's answer wins; regex heuristics fill whatever it left empty.
"""
import json
import re
from typing import Any, Dict, NamedTuple

from loguru import logger

from errors import ProviderError
from llm_provider import AIProvider

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
PHONE_PATTERNS = [
    re.compile(r"\+?1?[-.\s]?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})"),
    re.compile(r"\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})"),
    re.compile(r"\+[1-9][0-9]{3,14}"),
]
PHONE_LIKE = re.compile(r"\d{3}[-.\s]?\d{3}[-.\s]?\d{4}")
NAME_LINE = re.compile(r"^[A-Za-z\s.'-]+$")
JSON_OBJECT = re.compile(r"\{[^{}]*\"name\"[^{}]*\}", re.DOTALL)


class ContactInfo(NamedTuple):
    name: str = ""
    email: str = ""
    phone: str = ""


def _from_mapping(data: Dict[str, Any]) -> ContactInfo:
    return ContactInfo(
        name=str(data.get("name") or "").strip(),
        email=str(data.get("email") or "").strip(),
        phone=str(data.get("phone") or "").strip(),
    )


def parse_contact_response(response_text: str) -> ContactInfo:
    """Parse the provider's JSON reply, tolerating code fences and chatter."""
    text = response_text or ""
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0]
    elif "```" in text:
        text = text.split("```")[1].split("```")[0]

    try:
        data = json.loads(text.strip())
        if isinstance(data, dict):
            return _from_mapping(data)
    except json.JSONDecodeError:
        pass

    match = JSON_OBJECT.search(text)
    if match:
        try:
            return _from_mapping(json.loads(match.group(0)))
        except json.JSONDecodeError:
            pass

    logger.debug("Could not parse contact info reply")
    return ContactInfo()


def extract_with_regex(text: str) -> ContactInfo:
    if not text:
        return ContactInfo()

    email_match = EMAIL_PATTERN.search(text)
    email = email_match.group(0) if email_match else ""

    phone = ""
    for pattern in PHONE_PATTERNS:
        phone_match = pattern.search(text)
        if phone_match:
            phone = re.sub(r"[^\d+()-]", "", phone_match.group(0))
            break

    # First plausible line among the first five
    name = ""
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    for line in lines[:5]:
        lowered = line.lower()
        if (
            "@" not in line
            and not PHONE_LIKE.search(line)
            and "resume" not in lowered
            and "curriculum" not in lowered
            and 2 < len(line) < 50
            and NAME_LINE.match(line)
        ):
            name = line
            break

    return ContactInfo(name=name, email=email, phone=phone)


async def extract_contact_info(provider: AIProvider, resume_text: str) -> ContactInfo:
    """
    Ask the provider for contact details and merge in regex results.

    Quota exhaustion propagates so the caller can route to manual entry; any
    other provider failure falls back to regex extraction alone.
    """
    regex_info = extract_with_regex(resume_text)

    try:
        reply = await provider.extract_contact_info(resume_text)
    except ProviderError as error:
        if error.is_quota_exceeded:
            raise
        logger.warning(f"Contact extraction failed, using regex fallback: {error.message}")
        return regex_info

    ai_info = parse_contact_response(reply)
    return ContactInfo(
        name=ai_info.name or regex_info.name,
        email=ai_info.email or regex_info.email,
        phone=ai_info.phone or regex_info.phone,
    )
