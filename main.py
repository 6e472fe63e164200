"""
Main entry point for the Timed Interview Engine.
Provides a CLI for the interviewer: browse the candidate archive, inspect
or discard an unfinished session, and start the API server.
"""
import sys
from typing import Optional

import config
from dashboard import DEFAULT_SORT, SORT_OPTIONS, dashboard_stats, process_candidates
from persistence import JsonFileStore, SessionPersistence
from scoring import get_score_category
from state import CandidateResult


def print_separator():
    print("=" * 60)


def print_candidate_row(result: CandidateResult):
    profile = result.candidate_profile
    date = result.completed_at[:10]
    print(f"  {result.score_percent:>3}%  {profile.name:<24} {profile.email:<30} {date}  {result.id}")


def list_candidates(persistence: SessionPersistence, search: str = "", sort_by: str = DEFAULT_SORT):
    """Print the archive, filtered and sorted."""
    results = persistence.load_results()
    stats = dashboard_stats(results)

    print_separator()
    print("CANDIDATES")
    print_separator()
    print(
        f"Total: {stats['total']}   Average: {stats['average_score']}%   "
        f"Passed: {stats['passed']}"
    )
    print()

    shown = process_candidates(results, search, sort_by)
    if not shown:
        print("No candidates found.")
        return

    for result in shown:
        print_candidate_row(result)
    print()


def show_candidate(persistence: SessionPersistence, result_id: str) -> bool:
    """Print one result in full. Returns False if it does not exist."""
    result = persistence.get_result(result_id)
    if result is None:
        print(f"No candidate with id {result_id}")
        return False

    profile = result.candidate_profile
    print_separator()
    print(f"{profile.name} ({profile.email}, {profile.phone})")
    print_separator()
    print(
        f"\nScore: {result.score_percent}% ({result.total_points}/{result.max_points}) - "
        f"{get_score_category(result.score_percent)}"
    )
    print(f"Completed: {result.completed_at}")

    print("\nSummary:")
    print("-" * 40)
    print(result.ai_summary)

    print("\nQuestions:")
    print("-" * 40)
    for record in result.records:
        print(
            f"\n  Q{record.question_number} [{record.difficulty.value}] "
            f"{record.score}/10, {record.time_used_seconds}s"
        )
        print(f"  Q: {record.question}")
        print(f"  A: {record.answer}")
        print(f"  Feedback: {record.feedback}")
    print()
    return True


def show_saved_session(persistence: SessionPersistence):
    session = persistence.load_session()
    if session is None:
        print("No saved session.")
        return

    profile = session.candidate_profile
    print(f"Saved session {session.id}")
    print(f"  Candidate: {profile.name or '(unknown)'} {profile.email}")
    print(f"  Phase: {session.phase.value}")
    print(f"  Answered: {len(session.records)}/{config.TOTAL_QUESTIONS}")
    if session.current_question:
        print(f"  Current question: {session.current_question}")
        print(f"  Time remaining: {session.time_remaining}s")


def serve(port: int):
    import uvicorn

    uvicorn.run("api.main:app", host="127.0.0.1", port=port)


def main(argv: Optional[list] = None):
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Timed Interview Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --list                        # All candidates, best first
  python main.py --list --search jane --sort name-asc
  python main.py --show <candidate-id>         # Full transcript and summary
  python main.py --saved                       # Inspect the unfinished session
  python main.py --discard                     # Drop the unfinished session
  python main.py --serve --port 8000           # Run the API
        """,
    )
    parser.add_argument("--list", action="store_true", help="List archived candidates")
    parser.add_argument("--search", default="", help="Filter by name, email or phone")
    parser.add_argument(
        "--sort",
        default=DEFAULT_SORT,
        choices=SORT_OPTIONS,
        help="Sort order for --list",
    )
    parser.add_argument("--show", metavar="ID", help="Show one candidate result")
    parser.add_argument("--saved", action="store_true", help="Show the saved in-progress session")
    parser.add_argument("--discard", action="store_true", help="Discard the saved in-progress session")
    parser.add_argument("--serve", action="store_true", help="Run the API server")
    parser.add_argument("--port", type=int, default=8000, help="Port for --serve")
    parser.add_argument("--data-dir", default=str(config.DATA_DIR), help="Where results are stored")

    args = parser.parse_args(argv)
    config.configure_logging()

    if args.serve:
        serve(args.port)
        return

    persistence = SessionPersistence(JsonFileStore(args.data_dir))

    if args.show:
        if not show_candidate(persistence, args.show):
            sys.exit(1)
        return

    if args.saved:
        show_saved_session(persistence)
        return

    if args.discard:
        persistence.clear_session()
        print("Saved session discarded.")
        return

    if args.list:
        list_candidates(persistence, args.search, args.sort)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
