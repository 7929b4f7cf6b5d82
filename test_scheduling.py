# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""
Tests for the scheduling engine: intervals & conflicts, recurrence
expansion, drag & drop planning, recurring generation and analytics.
Services are wired against fresh in-memory repositories per test.
"""

from datetime import date, datetime, time, timedelta, timezone
from unittest.mock import patch

import pytest

from scheduling.models.domain import (
    Assignment,
    AssignmentProposal,
    Interval,
    Job,
    JobType,
    Placement,
    RecurrencePattern,
    RecurringJobTemplate,
    ScheduleDay,
    TeamMember,
    minutes_between,
)
from scheduling.repositories.errors import DuplicateKeyError, StoreError
from scheduling.repositories.history_repository import HistoryRepository
from scheduling.repositories.instance_repository import InstanceRepository
from scheduling.repositories.job_repository import JobRepository
from scheduling.repositories.member_repository import MemberRepository
from scheduling.repositories.schedule_repository import ScheduleRepository
from scheduling.repositories.template_repository import TemplateRepository
from scheduling.services import analytics
from scheduling.services.assignment_planner import AssignmentPlanner
from scheduling.services.calendar_export import export_icalendar
from scheduling.services.conflicts import (
    UNKNOWN_JOB,
    describe_conflicts,
    find_conflicts,
    has_overlap,
    overlaps,
)
from scheduling.services.recurrence import expand, recurrence_label
from scheduling.services.recurring_job_generator import RecurringJobGenerator
from scheduling.services.roster_service import RosterService
from scheduling.services.schedule_service import ScheduleService
from scheduling.services.template_service import TemplateService

ORG = "org-test"


def iv(start: str, end: str) -> Interval:
    return Interval(start=time.fromisoformat(start), end=time.fromisoformat(end))


def assignment(start: str, end: str, project_id: str = "job-x", schedule_id: str = "s") -> Assignment:
    return Assignment(
        schedule_id=schedule_id,
        project_id=project_id,
        start_time=time.fromisoformat(start),
        end_time=time.fromisoformat(end),
    )


class FailingInstanceRepository(InstanceRepository):
    """Instance store that rejects writes for chosen dates."""

    def __init__(self, failing_dates: set[date]) -> None:
        super().__init__()
        self.failing_dates = failing_dates

    def save(self, instance):
        if instance.scheduled_date in self.failing_dates:
            raise StoreError("instance insert timed out")
        return super().save(instance)


# ============================================
# Fixtures
# ============================================
@pytest.fixture
def repos():
    return {
        "members": MemberRepository(),
        "jobs": JobRepository(),
        "schedules": ScheduleRepository(),
        "templates": TemplateRepository(),
        "instances": InstanceRepository(),
        "history": HistoryRepository(),
    }


def _wire(repos):
    roster = RosterService(repos["members"], repos["jobs"], repos["history"])
    schedule = ScheduleService(repos["schedules"], repos["jobs"], repos["history"])
    planner = AssignmentPlanner(roster, schedule)
    templates = TemplateService(repos["templates"], repos["instances"], roster, repos["history"])
    generator = RecurringJobGenerator(
        repos["templates"], repos["instances"], roster, schedule, repos["history"]
    )
    roster.add_member(ORG, "Alice Martin", "alice@company.com", member_id="alice")
    roster.add_member(ORG, "Bob Dupont", "bob@company.com", member_id="bob")
    return {
        "roster": roster,
        "schedule": schedule,
        "planner": planner,
        "templates": templates,
        "generator": generator,
    }


@pytest.fixture
def svc(repos):
    return _wire(repos)


def _book(svc, person: str, day: date, start: str, end: str, job_name: str = "Smith basement"):
    job = svc["roster"].create_job(ORG, job_name)
    return svc["planner"].confirm(
        job.id, day, person, time.fromisoformat(start), time.fromisoformat(end)
    )


# ============================================
# Interval & conflict detection
# ============================================
class TestInterval:
    def test_touching_intervals_do_not_overlap(self):
        assert overlaps(iv("09:00", "17:00"), iv("17:00", "18:00")) is False

    def test_strict_overlap(self):
        assert overlaps(iv("09:00", "17:00"), iv("16:00", "18:00")) is True

    def test_containment_overlaps(self):
        assert overlaps(iv("09:00", "17:00"), iv("10:00", "11:00")) is True
        assert overlaps(iv("10:00", "11:00"), iv("09:00", "17:00")) is True

    def test_identical_intervals_overlap(self):
        assert overlaps(iv("09:00", "12:00"), iv("09:00", "12:00")) is True

    def test_overlap_is_symmetric(self):
        samples = [
            iv("08:00", "09:00"), iv("08:30", "10:00"), iv("09:00", "17:00"),
            iv("12:00", "13:00"), iv("16:59", "17:01"), iv("17:00", "18:00"),
        ]
        for a in samples:
            for b in samples:
                assert overlaps(a, b) == overlaps(b, a)

    def test_method_matches_function(self):
        a, b = iv("09:00", "12:00"), iv("11:00", "13:00")
        assert a.overlaps(b) == overlaps(a, b)

    def test_start_must_precede_end(self):
        with pytest.raises(ValueError):
            iv("17:00", "09:00")
        with pytest.raises(ValueError):
            iv("09:00", "09:00")

    def test_label(self):
        assert iv("09:00", "17:30").label == "09:00 - 17:30"

    def test_minutes(self):
        assert iv("09:15", "10:45").minutes == 90


class TestFindConflicts:
    def test_empty_existing(self):
        assert find_conflicts(iv("09:00", "17:00"), []) == []

    def test_no_overlap(self):
        existing = [assignment("07:00", "09:00"), assignment("17:00", "19:00")]
        assert find_conflicts(iv("09:00", "17:00"), existing) == []

    def test_returns_only_overlapping(self):
        a1 = assignment("08:00", "10:00", project_id="j1")
        a2 = assignment("12:00", "13:00", project_id="j2")
        a3 = assignment("17:00", "18:00", project_id="j3")
        conflicts = find_conflicts(
            iv("09:00", "17:00"), [a1, a2, a3], {"j1": "Smith", "j2": "Lee", "j3": "Oak"}
        )
        assert [c.job for c in conflicts] == ["Smith", "Lee"]
        assert conflicts[0].time == "08:00 - 10:00"
        assert conflicts[0].assignment_id == a1.id

    def test_unknown_job_name(self):
        conflicts = find_conflicts(iv("09:00", "17:00"), [assignment("10:00", "11:00")])
        assert conflicts[0].job == UNKNOWN_JOB

    def test_has_overlap(self):
        assert has_overlap([assignment("09:00", "12:00"), assignment("11:00", "13:00")])
        assert not has_overlap([assignment("09:00", "12:00"), assignment("12:00", "13:00")])
        assert not has_overlap([assignment("09:00", "12:00")])
        assert not has_overlap([])

    def test_describe_conflicts(self):
        conflicts = find_conflicts(
            iv("10:00", "12:00"), [assignment("09:00", "17:00", project_id="j1")], {"j1": "Smith"}
        )
        assert describe_conflicts(conflicts) == "Conflicts with Smith (09:00 - 17:00)"


# ============================================
# Recurrence expansion
# ============================================
class TestRecurrence:
    def test_daily_every_date(self):
        dates = expand("daily", None, date(2024, 1, 1), date(2024, 1, 10), date(2024, 1, 1))
        assert dates == [date(2024, 1, d) for d in range(1, 11)]

    def test_weekly_mondays_january_2024(self):
        dates = expand(
            RecurrencePattern.WEEKLY, 1, date(2024, 1, 1), date(2024, 1, 31), date(2024, 1, 1)
        )
        assert dates == [date(2024, 1, d) for d in (1, 8, 15, 22, 29)]
        assert all((b - a).days == 7 for a, b in zip(dates, dates[1:]))
        assert all(d.weekday() == 0 for d in dates)

    def test_weekly_sunday(self):
        dates = expand("weekly", 0, date(2024, 1, 1), date(2024, 1, 31), date(2024, 1, 1))
        assert dates == [date(2024, 1, d) for d in (7, 14, 21, 28)]

    def test_biweekly_anchored_at_start_date(self):
        start = date(2024, 1, 1)  # Monday
        dates = expand("biweekly", 1, start, start + timedelta(weeks=8) - timedelta(days=1), start)
        assert dates == [date(2024, 1, 1), date(2024, 1, 15), date(2024, 1, 29), date(2024, 2, 12)]

    def test_biweekly_parity_counts_from_template_start(self):
        # Template starts on a Wednesday; the following Monday is in week 0.
        dates = expand("biweekly", 1, date(2024, 1, 1), date(2024, 2, 29), date(2024, 1, 3))
        assert dates == [date(2024, 1, 8), date(2024, 1, 22), date(2024, 2, 5), date(2024, 2, 19)]

    def test_biweekly_window_after_start_keeps_parity(self):
        anchor = date(2024, 1, 1)
        full = expand("biweekly", 1, anchor, date(2024, 3, 31), anchor)
        later = expand("biweekly", 1, date(2024, 1, 20), date(2024, 3, 31), anchor)
        assert later == [d for d in full if d >= date(2024, 1, 20)]

    def test_monthly_day_31_skips_short_months(self):
        dates = expand("monthly", 31, date(2024, 1, 1), date(2024, 3, 31), date(2024, 1, 1))
        assert dates == [date(2024, 1, 31), date(2024, 3, 31)]

    def test_monthly_respects_template_start(self):
        dates = expand("monthly", 10, date(2024, 1, 1), date(2024, 3, 31), date(2024, 1, 15))
        assert dates == [date(2024, 2, 10), date(2024, 3, 10)]

    def test_template_end_date_limits_window(self):
        dates = expand(
            "weekly", 1, date(2024, 1, 1), date(2024, 3, 31), date(2024, 1, 1), date(2024, 1, 20)
        )
        assert dates == [date(2024, 1, 1), date(2024, 1, 8), date(2024, 1, 15)]

    def test_window_outside_template_is_empty(self):
        assert expand("daily", None, date(2023, 1, 1), date(2023, 12, 31), date(2024, 1, 1)) == []

    def test_repeatable(self):
        args = ("biweekly", 4, date(2024, 1, 1), date(2024, 6, 30), date(2024, 1, 5))
        assert expand(*args) == expand(*args)

    def test_invalid_weekday(self):
        with pytest.raises(ValueError):
            expand("weekly", 7, date(2024, 1, 1), date(2024, 1, 31), date(2024, 1, 1))

    def test_invalid_month_day(self):
        with pytest.raises(ValueError):
            expand("monthly", 0, date(2024, 1, 1), date(2024, 1, 31), date(2024, 1, 1))

    def test_labels(self):
        assert recurrence_label("daily", None) == "Every day"
        assert recurrence_label("weekly", 1) == "Every Monday"
        assert recurrence_label("biweekly", 5) == "Every other Friday"
        assert recurrence_label("monthly", 15) == "Day 15 of each month"


# ============================================
# Drag & drop planner
# ============================================
class TestAssignmentPlanner:
    def test_drop_on_date_places_job(self, svc, repos):
        job = svc["roster"].create_job(ORG, "Smith basement")
        outcome = svc["planner"].propose(job.id, date(2024, 1, 10))
        assert isinstance(outcome, Placement)
        assert repos["jobs"].get(job.id).scheduled_date == date(2024, 1, 10)
        assert repos["schedules"].count() == 0

    def test_drop_on_person_proposes_without_writing(self, svc, repos):
        job = svc["roster"].create_job(ORG, "Smith basement")
        proposal = svc["planner"].propose(job.id, date(2024, 1, 10), "alice")
        assert isinstance(proposal, AssignmentProposal)
        assert proposal.start_time == time(9, 0)
        assert proposal.end_time == time(17, 0)
        assert proposal.conflicts == []
        assert proposal.member_name == "Alice Martin"
        assert repos["schedules"].count() == 0

    def test_proposal_reports_conflicts(self, svc):
        _book(svc, "alice", date(2024, 1, 10), "08:00", "10:00", job_name="Lee kitchen")
        job = svc["roster"].create_job(ORG, "Oak St")
        proposal = svc["planner"].propose(job.id, date(2024, 1, 10), "alice")
        assert proposal.has_conflicts
        assert proposal.conflicts[0].job == "Lee kitchen"
        assert proposal.conflicts[0].time == "08:00 - 10:00"

    def test_confirm_creates_schedule_day(self, svc, repos):
        result = _book(svc, "alice", date(2024, 1, 10), "09:00", "12:00")
        assert result.schedule_day_created is True
        day = repos["schedules"].get_by_person_date("alice", date(2024, 1, 10))
        assert day.is_available is True
        assert [a.id for a in day.assignments] == [result.assignment.id]

    def test_confirm_reuses_schedule_day_and_flags_overlap(self, svc, repos):
        first = _book(svc, "alice", date(2024, 1, 10), "09:00", "12:00")
        second = _book(svc, "alice", date(2024, 1, 10), "11:00", "13:00", job_name="Oak St")
        assert second.schedule_day_created is False
        assert second.schedule_day_id == first.schedule_day_id
        assert len(second.conflicts) == 1
        assert len(repos["schedules"].get(first.schedule_day_id).assignments) == 2

    def test_touching_assignment_has_no_conflict(self, svc):
        _book(svc, "alice", date(2024, 1, 10), "09:00", "17:00")
        result = _book(svc, "alice", date(2024, 1, 10), "17:00", "18:00")
        assert result.conflicts == []

    def test_committed_assignment_visible_to_next_drop(self, svc):
        _book(svc, "alice", date(2024, 1, 10), "13:00", "14:00")
        job = svc["roster"].create_job(ORG, "Another")
        proposal = svc["planner"].propose(job.id, date(2024, 1, 10), "alice")
        assert len(proposal.conflicts) == 1

    def test_confirm_rejects_inverted_window_before_any_write(self, svc, repos):
        job = svc["roster"].create_job(ORG, "Smith basement")
        with pytest.raises(ValueError, match="End time must be after start time"):
            svc["planner"].confirm(job.id, date(2024, 1, 10), "alice", time(12, 0), time(9, 0))
        with pytest.raises(ValueError):
            svc["planner"].confirm(job.id, date(2024, 1, 10), "alice", time(9, 0), time(9, 0))
        assert repos["schedules"].count() == 0

    def test_inverted_window_checked_before_lookups(self, svc):
        with pytest.raises(ValueError):
            svc["planner"].confirm("missing-job", date(2024, 1, 10), "nobody", time(12, 0), time(9, 0))

    def test_unknown_job(self, svc):
        with pytest.raises(KeyError):
            svc["planner"].propose("missing-job", date(2024, 1, 10), "alice")

    def test_unknown_member(self, svc):
        job = svc["roster"].create_job(ORG, "Smith basement")
        with pytest.raises(KeyError):
            svc["planner"].propose(job.id, date(2024, 1, 10), "nobody")

    def test_inactive_member_cannot_be_assigned(self, svc, repos):
        job = svc["roster"].create_job(ORG, "Smith basement")
        svc["roster"].set_active("bob", False)
        with pytest.raises(ValueError, match="inactive"):
            svc["planner"].confirm(job.id, date(2024, 1, 10), "bob", time(9, 0), time(10, 0))
        assert repos["members"].get("bob") is not None

    def test_assignment_insert_failure_leaves_schedule_day(self, svc, repos):
        job = svc["roster"].create_job(ORG, "Smith basement")
        with patch.object(repos["schedules"], "add_assignment", side_effect=StoreError("down")):
            with pytest.raises(StoreError):
                svc["planner"].confirm(job.id, date(2024, 1, 10), "alice", time(9, 0), time(10, 0))
        day = repos["schedules"].get_by_person_date("alice", date(2024, 1, 10))
        assert day is not None and day.assignments == []
        retry = svc["planner"].confirm(job.id, date(2024, 1, 10), "alice", time(9, 0), time(10, 0))
        assert retry.schedule_day_created is False

    def test_commit_records_history(self, svc, repos):
        _book(svc, "alice", date(2024, 1, 10), "09:00", "10:00")
        events = repos["history"].get_all(event_type="assignment_committed")
        assert len(events) == 1
        assert events[0]["subject"] == "alice"


# ============================================
# Recurring templates & generation
# ============================================
def _template(svc, **overrides):
    fields = {
        "organization_id": ORG,
        "name": "Weekly dehumidifier check",
        "recurrence_pattern": RecurrencePattern.WEEKLY,
        "recurrence_day": 3,
        "start_date": date(2024, 1, 1),
        "end_date": date(2024, 1, 31),
        "start_time": time(9, 0),
        "end_time": time(12, 0),
        "assigned_to": "alice",
    }
    fields.update(overrides)
    return svc["templates"].create_template(**fields)


class TestTemplateService:
    def test_create_and_list(self, svc):
        template = _template(svc)
        listed = svc["templates"].list_templates(ORG)
        assert listed[0]["id"] == template.id
        assert listed[0]["recurrence_label"] == "Every Wednesday"
        assert listed[0]["generated_count"] == 0

    def test_weekly_requires_weekday(self, svc):
        with pytest.raises(ValueError):
            _template(svc, recurrence_day=None)
        with pytest.raises(ValueError):
            _template(svc, recurrence_day=9)

    def test_monthly_day_range(self, svc):
        with pytest.raises(ValueError):
            _template(svc, recurrence_pattern=RecurrencePattern.MONTHLY, recurrence_day=0)
        assert _template(svc, recurrence_pattern=RecurrencePattern.MONTHLY, recurrence_day=31)

    def test_daily_ignores_day(self, svc):
        assert _template(svc, recurrence_pattern=RecurrencePattern.DAILY, recurrence_day=None)

    def test_end_before_start_rejected(self, svc):
        with pytest.raises(ValueError):
            _template(svc, start_date=date(2024, 2, 1), end_date=date(2024, 1, 1))

    def test_inverted_times_rejected(self, svc):
        with pytest.raises(ValueError):
            _template(svc, start_time=time(12, 0), end_time=time(9, 0))

    def test_unknown_assignee(self, svc):
        with pytest.raises(KeyError):
            _template(svc, assigned_to="nobody")

    def test_toggle_and_delete(self, svc, repos):
        template = _template(svc)
        assert svc["templates"].toggle_active(template.id).is_active is False
        assert svc["templates"].toggle_active(template.id).is_active is True
        svc["templates"].delete_template(template.id)
        assert repos["templates"].count() == 0
        with pytest.raises(KeyError):
            svc["templates"].delete_template(template.id)


class TestRecurringJobGenerator:
    def test_weekly_wednesdays_end_to_end(self, svc, repos):
        template = _template(svc)
        outcomes = svc["generator"].generate_recurring_jobs(
            template.id, date(2024, 1, 1), date(2024, 1, 31)
        )
        assert [o.generated_date for o in outcomes] == [
            date(2024, 1, d) for d in (3, 10, 17, 24, 31)
        ]
        assert all(o.was_skipped is False for o in outcomes)
        assert repos["instances"].count() == 5
        assert repos["jobs"].count() == 5
        day = repos["schedules"].get_by_person_date("alice", date(2024, 1, 10))
        assert day.assignments[0].start_time == time(9, 0)
        assert day.assignments[0].end_time == time(12, 0)

    def test_generated_job_copies_template_payload(self, svc, repos):
        template = _template(svc, job_type=JobType.CONTENTS, address="12 Oak St")
        svc["generator"].generate(template.id, date(2024, 1, 1), date(2024, 1, 5))
        job = repos["jobs"].get_all(ORG)[0]
        assert job.name == template.name
        assert job.job_type is JobType.CONTENTS
        assert job.address == "12 Oak St"
        assert job.scheduled_date == date(2024, 1, 3)
        assert job.assigned_to == "alice"

    def test_regeneration_is_idempotent(self, svc, repos):
        template = _template(svc)
        first = svc["generator"].generate(template.id, date(2024, 1, 1), date(2024, 1, 31))
        before = {(i.scheduled_date, i.was_skipped) for i in repos["instances"].get_by_template(template.id)}
        second = svc["generator"].generate(template.id, date(2024, 1, 1), date(2024, 1, 31))
        after = {(i.scheduled_date, i.was_skipped) for i in repos["instances"].get_by_template(template.id)}
        assert first.generated == 5
        assert second.generated == 0
        assert second.results == []
        assert before == after
        assert repos["jobs"].count() == 5

    def test_overlapping_window_only_adds_new_dates(self, svc):
        template = _template(svc, end_date=None)
        svc["generator"].generate(template.id, date(2024, 1, 1), date(2024, 1, 15))
        result = svc["generator"].generate(template.id, date(2024, 1, 8), date(2024, 1, 31))
        assert [o.generated_date for o in result.results] == [
            date(2024, 1, 17), date(2024, 1, 24), date(2024, 1, 31)
        ]

    def test_conflict_skipped_when_auto_skip(self, svc, repos):
        _book(svc, "alice", date(2024, 1, 10), "09:00", "17:00", job_name="Smith basement")
        template = _template(svc, start_time=time(10, 0), end_time=time(12, 0))
        result = svc["generator"].generate(template.id, date(2024, 1, 1), date(2024, 1, 31))
        skipped = [o for o in result.results if o.was_skipped]
        assert [o.generated_date for o in skipped] == [date(2024, 1, 10)]
        assert skipped[0].skip_reason
        assert "Smith basement" in skipped[0].skip_reason
        assert result.generated == 4
        assert result.skipped == 1
        day = repos["schedules"].get_by_person_date("alice", date(2024, 1, 10))
        assert len(day.assignments) == 1
        instance = [i for i in repos["instances"].get_by_template(template.id) if i.was_skipped][0]
        assert instance.project_id is None

    def test_conflict_assigned_anyway_without_auto_skip(self, svc, repos):
        _book(svc, "alice", date(2024, 1, 10), "09:00", "17:00")
        template = _template(svc, start_time=time(10, 0), end_time=time(12, 0), auto_skip_conflicts=False)
        result = svc["generator"].generate(template.id, date(2024, 1, 1), date(2024, 1, 31))
        assert result.skipped == 0
        assert result.generated == 5
        day = repos["schedules"].get_by_person_date("alice", date(2024, 1, 10))
        assert len(day.assignments) == 2

    def test_touching_existing_assignment_is_not_a_conflict(self, svc):
        _book(svc, "alice", date(2024, 1, 10), "12:00", "17:00")
        template = _template(svc)
        result = svc["generator"].generate(template.id, date(2024, 1, 1), date(2024, 1, 31))
        assert result.skipped == 0

    def test_unassigned_template_always_generates(self, svc, repos):
        _book(svc, "alice", date(2024, 1, 10), "09:00", "17:00")
        template = _template(svc, assigned_to=None)
        result = svc["generator"].generate(template.id, date(2024, 1, 1), date(2024, 1, 31))
        assert result.generated == 5
        assert repos["schedules"].count() == 1

    def test_failed_date_does_not_stop_the_run(self, svc, repos):
        failing = FailingInstanceRepository({date(2024, 1, 17)})
        repos["instances"] = failing
        wired = _wire(repos)
        template = _template(wired)
        result = wired["generator"].generate(template.id, date(2024, 1, 1), date(2024, 1, 31))
        assert [f.date for f in result.failures] == [date(2024, 1, 17)]
        assert "timed out" in result.failures[0].error
        assert result.generated == 4
        assert date(2024, 1, 17) not in failing.dates_for_template(template.id)
        assert [o.generated_date for o in result.results] == [
            date(2024, 1, d) for d in (3, 10, 24, 31)
        ]

    def test_paused_template_refuses(self, svc):
        template = _template(svc)
        svc["templates"].toggle_active(template.id)
        with pytest.raises(ValueError, match="paused"):
            svc["generator"].generate(template.id, date(2024, 1, 1), date(2024, 1, 31))

    def test_unknown_template(self, svc):
        with pytest.raises(KeyError):
            svc["generator"].generate("missing", date(2024, 1, 1), date(2024, 1, 31))

    def test_inverted_window(self, svc):
        template = _template(svc)
        with pytest.raises(ValueError):
            svc["generator"].generate(template.id, date(2024, 1, 31), date(2024, 1, 1))

    def test_ended_template_default_window_is_empty(self, svc, repos):
        template = _template(svc, start_date=date(2020, 1, 1), end_date=date(2020, 1, 31))
        result = svc["generator"].generate(template.id)
        assert result.results == []
        assert result.failures == []
        assert result.generated == 0
        assert repos["instances"].count() == 0

    def test_start_after_template_end_is_empty(self, svc):
        template = _template(svc)
        result = svc["generator"].generate(template.id, start_date=date(2024, 3, 1))
        assert result.results == []

    def test_generate_all_active_with_ended_template(self, svc):
        ended = _template(svc, name="Finished", start_date=date(2020, 1, 1), end_date=date(2020, 1, 31))
        summaries = svc["generator"].generate_all_active(ORG)
        assert summaries == [
            {"template_id": ended.id, "name": "Finished", "generated": 0, "skipped": 0, "failed": 0}
        ]

    def test_generate_recurring_jobs_returns_outcomes(self, svc):
        _book(svc, "alice", date(2024, 1, 17), "09:00", "17:00", job_name="Lee kitchen")
        template = _template(svc)
        outcomes = svc["generator"].generate_recurring_jobs(
            template.id, date(2024, 1, 1), date(2024, 1, 31)
        )
        assert [(o.generated_date, o.was_skipped) for o in outcomes] == [
            (date(2024, 1, 3), False),
            (date(2024, 1, 10), False),
            (date(2024, 1, 17), True),
            (date(2024, 1, 24), False),
            (date(2024, 1, 31), False),
        ]
        assert outcomes[2].skip_reason == "Conflicts with Lee kitchen (09:00 - 17:00)"
        assert all(o.skip_reason is None for o in outcomes if not o.was_skipped)

    def test_inactive_assignee_refuses(self, svc, repos):
        template = _template(svc)
        svc["roster"].set_active("alice", False)
        with pytest.raises(ValueError):
            svc["generator"].generate(template.id, date(2024, 1, 1), date(2024, 1, 31))
        assert repos["instances"].count() == 0

    def test_default_window_uses_template_end(self, svc):
        template = _template(svc, end_date=date(2024, 6, 30))
        start, end = RecurringJobGenerator.default_window(template, date(2024, 1, 1))
        assert (start, end) == (date(2024, 1, 1), date(2024, 6, 30))

    def test_default_window_without_template_end(self, svc):
        template = _template(svc, end_date=None)
        start, end = RecurringJobGenerator.default_window(template, date(2024, 1, 31))
        assert end == date(2024, 2, 29)

    def test_generate_all_active(self, svc):
        active = _template(svc)
        paused = _template(svc, name="Paused")
        svc["templates"].toggle_active(paused.id)
        summaries = svc["generator"].generate_all_active(ORG, date(2024, 1, 1), date(2024, 1, 31))
        assert [s["template_id"] for s in summaries] == [active.id]
        assert summaries[0]["generated"] == 5

    def test_instance_counts_in_listing(self, svc):
        _book(svc, "alice", date(2024, 1, 10), "09:00", "17:00")
        template = _template(svc)
        svc["generator"].generate(template.id, date(2024, 1, 1), date(2024, 1, 31))
        listed = svc["templates"].list_templates(ORG)[0]
        assert listed["generated_count"] == 4
        assert listed["skipped_count"] == 1


# ============================================
# Analytics
# ============================================
def _day(user_id, day, assignments, start=None, end=None):
    schedule = ScheduleDay(
        organization_id=ORG,
        user_id=user_id,
        date=day,
        start_time=time.fromisoformat(start) if start else None,
        end_time=time.fromisoformat(end) if end else None,
    )
    for s, e, project in assignments:
        schedule.assignments.append(assignment(s, e, project_id=project, schedule_id=schedule.id))
    return schedule


@pytest.fixture
def sample_days():
    return [
        _day("alice", date(2024, 1, 8), [("09:00", "12:00", "j1"), ("11:00", "13:00", "j2")], "08:00", "18:00"),
        _day("alice", date(2024, 1, 9), [("13:00", "15:30", "j1")]),
        _day("bob", date(2024, 1, 8), [("09:00", "17:00", "j3"), ("17:00", "18:00", "j3")]),
    ]


@pytest.fixture
def members():
    return [
        TeamMember(id="alice", organization_id=ORG, full_name="Alice Martin", email="alice@company.com"),
        TeamMember(id="bob", organization_id=ORG, full_name="Bob Dupont", email="bob@company.com"),
        TeamMember(id="carol", organization_id=ORG, full_name="Carol Chen", email="carol@company.com"),
    ]


class TestAnalytics:
    def test_day_hours_counts_shift_and_assignments(self, sample_days):
        assert analytics.day_hours(sample_days[0]) == (15, 2)

    def test_hours_are_truncated(self, sample_days):
        assert analytics.day_hours(sample_days[1]) == (2, 0)

    def test_totals(self, sample_days):
        assert analytics.total_hours(sample_days) == 26
        assert analytics.overtime_hours(sample_days) == 2

    def test_utilization_rate(self):
        assert analytics.utilization_rate(3, 2) == 50
        assert analytics.utilization_rate(5, 0) == 0

    def test_conflict_rate_and_efficiency(self, sample_days):
        rate = analytics.conflict_rate(sample_days)
        assert round(rate, 2) == 33.33
        assert analytics.scheduling_efficiency(rate) == pytest.approx(100 - rate)
        assert analytics.scheduling_efficiency(150) == 0
        assert analytics.conflict_rate([]) == 0

    def test_member_stats(self, sample_days, members):
        stats = analytics.member_stats(sample_days, members)
        assert [s["id"] for s in stats] == ["alice", "bob", "carol"]
        alice, bob, carol = stats
        assert alice["total_hours"] == 17
        assert alice["overtime_hours"] == 2
        assert alice["total_assignments"] == 3
        assert alice["utilization_rate"] == 50
        assert bob["utilization_rate"] == 67
        assert carol["scheduled_days"] == 0
        assert carol["utilization_rate"] == 0

    def test_overall_stats(self, sample_days):
        overall = analytics.overall_stats(sample_days)
        assert overall == {
            "total_schedules": 3,
            "total_assignments": 5,
            "total_hours": 26,
            "overtime_hours": 2,
            "avg_utilization": 56,
        }

    def test_efficiency_metrics(self, sample_days, members):
        metrics = analytics.efficiency_metrics(sample_days, members)
        assert metrics == {
            "schedule_compliance_rate": 67,
            "conflict_rate": 33,
            "scheduling_efficiency": 67,
        }

    def test_job_type_distribution(self, sample_days):
        jobs = {
            "j1": Job(id="j1", organization_id=ORG, name="A", job_type=JobType.MITIGATION),
            "j3": Job(id="j3", organization_id=ORG, name="C", job_type=JobType.RECONSTRUCTION),
        }
        assert analytics.job_type_distribution(sample_days, jobs) == {
            "mitigation": 2,
            "contents": 0,
            "reconstruction": 2,
        }

    def test_report_windows(self):
        assert analytics.report_window("week", date(2024, 1, 10)) == (date(2024, 1, 7), date(2024, 1, 13))
        assert analytics.report_window("week", date(2024, 1, 7)) == (date(2024, 1, 7), date(2024, 1, 13))
        assert analytics.report_window("month", date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))
        assert analytics.report_window("month", date(2024, 12, 15)) == (date(2024, 12, 1), date(2024, 12, 31))
        assert analytics.report_window("all", date(2024, 5, 1)) == (date(2020, 1, 1), date(2024, 5, 1))

    def test_service_report(self, svc, repos):
        _book(svc, "alice", date(2024, 1, 10), "09:00", "12:00")
        report = analytics.AnalyticsService(
            repos["schedules"], repos["members"], repos["jobs"]
        ).report(ORG, date(2024, 1, 1), date(2024, 1, 31))
        assert report["overall_stats"]["total_assignments"] == 1
        assert report["member_stats"][0]["id"] == "alice"
        assert report["job_type_distribution"]["mitigation"] == 1


# ============================================
# Calendar export
# ============================================
class TestCalendarExport:
    def test_one_event_per_assignment(self, sample_days, members):
        jobs = {"j1": Job(id="j1", organization_id=ORG, name="Smith basement", address="1 Elm St")}
        body = export_icalendar(
            sample_days,
            {m.id: m for m in members},
            jobs,
            "Acme Restoration",
            now=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        )
        assert body.startswith("BEGIN:VCALENDAR\r\n")
        assert body.endswith("END:VCALENDAR\r\n")
        assert body.count("BEGIN:VEVENT") == 5
        assert "DTSTART:20240108T090000" in body
        assert "DTEND:20240108T120000" in body
        assert "SUMMARY:Smith basement" in body
        assert "SUMMARY:Untitled Job" in body
        assert "DTSTAMP:20240101T120000Z" in body
        assert "TRIGGER:-PT30M" in body

    def test_empty_schedule(self):
        body = export_icalendar([], {}, {}, "Crew")
        assert "BEGIN:VEVENT" not in body
        assert "X-WR-CALNAME:Crew - Team Schedule" in body

    def test_long_lines_are_folded(self):
        name = "Water extraction, drywall tear-out and dehumidifier setup at the Smith residence (basement)"
        address = "1234 Élan Boulevard, Apartment 5B, Springfield Heights, Colorado 80000, USA"
        day = _day("alice", date(2024, 1, 8), [("09:00", "12:00", "j1")])
        jobs = {"j1": Job(id="j1", organization_id=ORG, name=name, address=address)}
        body = export_icalendar([day], {}, jobs, "Crew")

        physical = body.split("\r\n")
        assert all(len(line.encode("utf-8")) <= 75 for line in physical)
        assert any(line.startswith(" ") for line in physical)

        unfolded = body.replace("\r\n ", "")
        assert "SUMMARY:" + name.replace(",", "\\,") in unfolded
        assert "LOCATION:" + address.replace(",", "\\,") in unfolded

    def test_short_lines_untouched(self):
        day = _day("alice", date(2024, 1, 8), [("09:00", "12:00", "j1")])
        jobs = {"j1": Job(id="j1", organization_id=ORG, name="Lee kitchen")}
        body = export_icalendar([day], {}, jobs, "Crew")
        assert "\r\n " not in body


# ============================================
# Schedule service
# ============================================
class TestScheduleService:
    def test_ensure_schedule_day_reuses_day_created_concurrently(self, repos):
        service = ScheduleService(repos["schedules"], repos["jobs"], repos["history"])
        winner = repos["schedules"].save(
            ScheduleDay(organization_id=ORG, user_id="alice", date=date(2024, 1, 10))
        )
        real_lookup = repos["schedules"].get_by_person_date
        stale_then_fresh = [None, winner]
        with patch.object(
            repos["schedules"],
            "get_by_person_date",
            side_effect=lambda user_id, day: stale_then_fresh.pop(0),
        ):
            schedule, created = service.ensure_schedule_day(ORG, "alice", date(2024, 1, 10))
        assert created is False
        assert schedule.id == winner.id
        assert repos["schedules"].count() == 1
        assert real_lookup("alice", date(2024, 1, 10)).id == winner.id

    def test_ensure_schedule_day_propagates_other_store_errors(self, repos):
        service = ScheduleService(repos["schedules"], repos["jobs"], repos["history"])
        with patch.object(repos["schedules"], "save", side_effect=StoreError("store down")):
            with pytest.raises(StoreError):
                service.ensure_schedule_day(ORG, "alice", date(2024, 1, 10))

    def test_minutes_and_whole_hours_agree(self):
        interval = iv("09:15", "11:00")
        assert interval.minutes == minutes_between(time(9, 15), time(11, 0)) == 105
        assert analytics.whole_hours(interval.start, interval.end) == 1


# ============================================
# Repositories
# ============================================
class TestRepositories:
    def test_instance_unique_per_template_date(self):
        from scheduling.models.domain import RecurringJobInstance

        repo = InstanceRepository()
        repo.save(RecurringJobInstance(template_id="t", scheduled_date=date(2024, 1, 3)))
        with pytest.raises(DuplicateKeyError):
            repo.save(RecurringJobInstance(template_id="t", scheduled_date=date(2024, 1, 3)))
        repo.save(RecurringJobInstance(template_id="u", scheduled_date=date(2024, 1, 3)))
        assert repo.count() == 2

    def test_schedule_day_unique_per_person_date(self):
        repo = ScheduleRepository()
        repo.save(ScheduleDay(organization_id=ORG, user_id="alice", date=date(2024, 1, 3)))
        with pytest.raises(DuplicateKeyError):
            repo.save(ScheduleDay(organization_id=ORG, user_id="alice", date=date(2024, 1, 3)))

    def test_history_bounded_and_filtered(self):
        repo = HistoryRepository(max_size=3)
        for event_type, subject in [("a", "x"), ("b", "y"), ("a", "y"), ("c", "x")]:
            repo.record_event(event_type, subject, {})
        assert repo.count() == 3
        assert [e["event_type"] for e in repo.get_all()] == ["c", "a", "b"]
        assert [e["event_type"] for e in repo.get_all(subject="y")] == ["a", "b"]
        assert repo.count_by_type() == {"b": 1, "a": 1, "c": 1}
        assert len(repo.get_all(limit=1)) == 1

    def test_template_validation_on_model(self):
        with pytest.raises(ValueError):
            RecurringJobTemplate(
                organization_id=ORG,
                name="x",
                recurrence_pattern=RecurrencePattern.BIWEEKLY,
                recurrence_day=None,
                start_date=date(2024, 1, 1),
            )
