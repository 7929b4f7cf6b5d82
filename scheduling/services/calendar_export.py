# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: iCalendar export of committed assignments.
Pure computation: returns the .ics body, the controller streams it.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime, timezone

from scheduling.models.domain import Job, ScheduleDay, TeamMember

UNASSIGNED = "Unassigned"
UNTITLED_JOB = "Untitled Job"


def _stamp(value: datetime) -> str:
    return value.strftime("%Y%m%dT%H%M%S")


def _escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def _fold(line: str, limit: int = 75) -> str:
    """Split a content line into CRLF + space continuations of at most ``limit`` octets."""
    if len(line.encode("utf-8")) <= limit:
        return line
    parts: list[str] = []
    current = ""
    size = 0
    for char in line:
        width = len(char.encode("utf-8"))
        budget = limit if not parts else limit - 1
        if size + width > budget:
            parts.append(current)
            current, size = "", 0
        current += char
        size += width
    parts.append(current)
    return "\r\n ".join(parts)


def export_icalendar(
    days: Iterable[ScheduleDay],
    members: Mapping[str, TeamMember],
    jobs: Mapping[str, Job],
    calendar_name: str,
    now: datetime | None = None,
) -> str:
    """One VEVENT per assignment, floating local times, 30 minute reminder."""
    dtstamp = _stamp((now or datetime.now(timezone.utc)).astimezone(timezone.utc)) + "Z"
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Restoration Scheduling//EN",
        f"X-WR-CALNAME:{_escape(calendar_name)} - Team Schedule",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]

    for day in days:
        member = members.get(day.user_id)
        member_name = member.display_name if member else UNASSIGNED
        for assignment in day.assignments:
            job = jobs.get(assignment.project_id)
            job_name = job.name if job else UNTITLED_JOB
            description = f"Type: {job.job_type.value if job else '-'}\nAssigned to: {member_name}"
            if assignment.notes:
                description += f"\nNotes: {assignment.notes}"
            lines.extend(
                [
                    "BEGIN:VEVENT",
                    f"UID:{assignment.id}@scheduling",
                    f"DTSTAMP:{dtstamp}",
                    f"DTSTART:{_stamp(datetime.combine(day.date, assignment.start_time))}",
                    f"DTEND:{_stamp(datetime.combine(day.date, assignment.end_time))}",
                    f"SUMMARY:{_escape(job_name)}",
                    f"DESCRIPTION:{_escape(description)}",
                    f"LOCATION:{_escape(job.address or '') if job else ''}",
                    "STATUS:CONFIRMED",
                    "BEGIN:VALARM",
                    "TRIGGER:-PT30M",
                    "ACTION:DISPLAY",
                    f"DESCRIPTION:Reminder: {_escape(job_name)}",
                    "END:VALARM",
                    "END:VEVENT",
                ]
            )

    lines.append("END:VCALENDAR")
    return "\r\n".join(_fold(line) for line in lines) + "\r\n"


def export_filename(today: date | None = None) -> str:
    return f"schedule-{(today or date.today()).isoformat()}.ics"
