"""
Chat feature: Context block template.

The model is prompted against this exact shape: four labeled sections, each
with an explicit empty-state line.
"""

NO_TIMETABLE = "No classes scheduled."
NO_REMINDERS = "No pending reminders."
NO_EVENTS = "No recent notices."
NO_KB_MATCHES = "No specific KB articles found."


CONTEXT_TEMPLATE = """
You are the Campus Assistant AI. You have access to the user's personal schedule and campus data.
Answer the user's question based on the following context.

--- USER CONTEXT ---
TIMETABLE (Weekly Schedule):
{timetable}

PENDING REMINDERS:
{reminders}

--- CAMPUS CONTEXT ---
RECENT EVENTS & NOTICES:
{events}

KNOWLEDGE BASE (Policies & Info):
{knowledge}
--------------------

If the answer is not in the context, say you don't know but try to be helpful based on general knowledge if appropriate.
Keep answers concise and friendly.
"""


def _lines(rows: list[dict], fmt, empty: str) -> str:
    if not rows:
        return empty
    return "\n".join(fmt(r) for r in rows)


def format_timetable_entry(t: dict) -> str:
    return (
        f"- {t.get('day_of_week')}: {t.get('course_name')} ({t.get('course_code')}) "
        f"at {t.get('start_time')} in {t.get('location')}"
    )


def format_reminder(r: dict) -> str:
    return f"- {r.get('title')} (Due: {r.get('due_at')}, Category: {r.get('category')})"


def format_event(e: dict) -> str:
    return (
        f"- [{e.get('category')}] {e.get('title')}: {e.get('description')} "
        f"(Date: {e.get('event_date') or 'N/A'})"
    )


def format_kb_match(d: dict) -> str:
    return f"- {d.get('title')}: {d.get('content')}"


def render_context(
    timetables: list[dict],
    reminders: list[dict],
    events: list[dict],
    knowledge: list[dict],
) -> str:
    """Render the four context sources into one deterministic block."""
    return CONTEXT_TEMPLATE.format(
        timetable=_lines(timetables, format_timetable_entry, NO_TIMETABLE),
        reminders=_lines(reminders, format_reminder, NO_REMINDERS),
        events=_lines(events, format_event, NO_EVENTS),
        knowledge=_lines(knowledge, format_kb_match, NO_KB_MATCHES),
    )
