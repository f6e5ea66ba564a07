"""
Tests for cron parsing and job registration in services/scheduler.py
"""

from unittest.mock import MagicMock

import pytest
from apscheduler.triggers.cron import CronTrigger

from services import scheduler as scheduler_module
from services.scheduler import build_cron_trigger, run_now, setup_scheduler


@pytest.fixture(autouse=True)
def reset_scheduler():
    """Each test starts without a running scheduler"""
    scheduler_module._scheduler = None
    yield
    scheduler_module._scheduler = None


class TestBuildCronTrigger:
    """Tests for build_cron_trigger()"""

    def test_six_fields_with_seconds(self):
        trigger = build_cron_trigger("0 0 7 * * *", timezone="UTC")
        assert isinstance(trigger, CronTrigger)
        fields = {field.name: str(field) for field in trigger.fields}
        assert fields["second"] == "0"
        assert fields["minute"] == "0"
        assert fields["hour"] == "7"

    def test_five_fields(self):
        trigger = build_cron_trigger("30 9 * * *", timezone="UTC")
        fields = {field.name: str(field) for field in trigger.fields}
        assert fields["minute"] == "30"
        assert fields["hour"] == "9"

    def test_wrong_field_count(self):
        with pytest.raises(ValueError):
            build_cron_trigger("* * *")

    def test_invalid_value(self):
        with pytest.raises(ValueError):
            build_cron_trigger("0 0 25 * * *", timezone="UTC")


class TestSetupScheduler:
    """Tests for setup_scheduler()"""

    def test_registers_both_jobs(self):
        reminders = MagicMock()
        scheduler = MagicMock()
        setup_scheduler(reminders, "0 0 7 * * *", "0 0 8 * * *", scheduler=scheduler)

        job_ids = [c.kwargs["id"] for c in scheduler.add_job.call_args_list]
        assert job_ids == ["congratulations", "reminders"]
        assert scheduler.add_job.call_args_list[0].args[0] is reminders.run_congratulations
        assert scheduler.add_job.call_args_list[1].kwargs["max_instances"] == 1
        scheduler.start.assert_called_once()

    def test_invalid_expression_skipped(self):
        scheduler = MagicMock()
        setup_scheduler(MagicMock(), "not a cron", "0 0 8 * * *", scheduler=scheduler)
        assert [c.kwargs["id"] for c in scheduler.add_job.call_args_list] == ["reminders"]

    def test_empty_expression_disables_job(self):
        scheduler = MagicMock()
        setup_scheduler(MagicMock(), "", "0 0 8 * * *", scheduler=scheduler)
        assert scheduler.add_job.call_count == 1

    def test_second_setup_reuses_running_scheduler(self):
        scheduler = MagicMock()
        first = setup_scheduler(MagicMock(), "0 0 7 * * *", "0 0 8 * * *", scheduler=scheduler)
        assert setup_scheduler(MagicMock()) is first
        scheduler.start.assert_called_once()


class TestRunNow:
    def test_runs_full_cycle(self):
        reminders = MagicMock()
        run_now(reminders)
        reminders.run_cycle.assert_called_once_with()
