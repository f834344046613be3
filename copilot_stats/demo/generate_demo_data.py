# copilot_stats/demo/generate_demo_data.py

import json
import sys
from datetime import date, timedelta
from pathlib import Path

START_DAY = date(2025, 3, 3)

USERS = [
    # login, languages, model, chat user, daily generations
    ("alice", ["python", "yaml"], "claude-3.7-sonnet", True, 18),
    ("bob", ["typescript"], "gpt-4o", False, 9),
    ("carol", ["csharp", "sql"], "gpt-4.1", True, 4),
]


def build_demo_lines(weeks: int = 2) -> list:
    """Build NDJSON lines for a few users over the given number of weeks."""
    lines = []
    end_day = START_DAY + timedelta(days=7 * weeks - 1)

    for offset in range(7 * weeks):
        day = START_DAY + timedelta(days=offset)
        if day.weekday() >= 5:
            continue

        for user_id, (login, languages, model, chat, generations) in enumerate(USERS, start=1):
            # carol joins in the second week
            if login == "carol" and offset < 7:
                continue

            acceptances = generations // 2 if offset > 0 or login != "bob" else 0
            language = languages[offset % len(languages)]
            record = {
                "report_start_day": START_DAY.isoformat(),
                "report_end_day": end_day.isoformat(),
                "day": day.isoformat(),
                "enterprise_id": "demo",
                "user_id": user_id,
                "user_login": login,
                "user_initiated_interaction_count": 3 if chat else 0,
                "code_generation_activity_count": generations,
                "code_acceptance_activity_count": acceptances,
                "generated_loc_sum": generations * 6,
                "accepted_loc_sum": acceptances * 5,
                "totals_by_ide": [
                    {
                        "ide": "vscode",
                        "code_generation_activity_count": generations,
                        "code_acceptance_activity_count": acceptances,
                    }
                ],
                "totals_by_feature": [
                    {
                        "feature": "code_completion",
                        "code_generation_activity_count": generations,
                        "code_acceptance_activity_count": acceptances,
                    }
                ],
                "totals_by_language_feature": [
                    {
                        "language": language,
                        "feature": "code_completion",
                        "code_generation_activity_count": generations,
                        "code_acceptance_activity_count": acceptances,
                    }
                ],
                "totals_by_language_model": [
                    {
                        "language": language,
                        "model": model,
                        "code_generation_activity_count": generations,
                        "code_acceptance_activity_count": acceptances,
                    }
                ],
                "totals_by_model_feature": [
                    {
                        "model": model,
                        "feature": "code_completion",
                        "code_generation_activity_count": generations,
                        "code_acceptance_activity_count": acceptances,
                    }
                ],
                "used_agent": False,
                "used_chat": chat,
            }
            lines.append(json.dumps(record))

    # Exports occasionally contain truncated lines
    lines.append('{"day": "2025-03-04", "user_login": ')
    return lines


def write_demo_file(path: Path, weeks: int = 2) -> int:
    """Write the demo export and return the number of lines written."""
    lines = build_demo_lines(weeks)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return len(lines)


if __name__ == "__main__":
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("demo_usage.ndjson")
    count = write_demo_file(target)
    print(f"Demo usage data written to {target} ({count} lines)")
