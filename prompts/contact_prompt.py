"""
Contact-info extraction prompt.
"""


def get_contact_system_prompt() -> str:
    return """You extract personal contact information from resume text.

Look for:
- Full name (usually at the top)
- Email address (contains an @ symbol)
- Phone number (formats like +1-xxx-xxx-xxxx, (xxx) xxx-xxxx, xxx.xxx.xxxx)

Return ONLY a valid JSON object with these exact keys: name, email, phone.
If any field is not clearly found, use an empty string "".
Do not include markdown, explanations or code blocks.

Example:
{"name": "John Doe", "email": "john.doe@email.com", "phone": "+1-234-567-8900"}"""


def build_contact_request(resume_text: str) -> str:
    return f"""Resume text:

{(resume_text or "")[:3000]}"""
