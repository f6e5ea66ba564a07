"""
Scheduled notification cycle for Birthder.

Each tick congratulates today's birthday and work anniversary people in the shared
channel, sends advance reminders to everyone else, manages the temporary birthday
channels and pitching-in surveys, and nudges people who never set a birthday.

Main class: ReminderService. Entry points for the scheduler: run_congratulations(),
run_reminders(), run_cycle().
"""

from datetime import date, datetime
from typing import List, Optional

from config import (
    ANNIVERSARY_QUOTES,
    BIRTHDAY_ANNOUNCEMENT_BEFORE_MODE,
    BIRTHDAY_ANNOUNCEMENT_CHANNEL,
    BIRTHDAY_CHANNEL_BLACKLIST,
    BIRTHDAY_CHANNEL_MESSAGE,
    BIRTHDAY_CHANNEL_TTL,
    BIRTHDAY_LOGGING_CHANNEL,
    BIRTHDAY_QUOTES,
    COMPANY_NAME,
    CREATE_BIRTHDAY_CHANNELS,
    CREATE_PITCHING_IN_SURVEYS,
    MSG_BIRTHDAYLESS_REMINDER,
    MSG_PITCHING_IN_SURVEY,
    NUMBER_OF_DAYS_IN_ADVANCE,
    OUTPUT_SHORT_DATE_FORMAT,
    get_logger,
)
from services.events import (
    EventKind,
    find_users_for_event,
    form_anniversary_message,
    form_congratulation_message,
    form_reminder_message,
    target_date,
)
from storage.celebration_state import (
    BirthdayChannel,
    CelebrationStateStore,
    PitchingInSurvey,
)
from utils.templates import TemplatePool, render

logger = get_logger("reminders")


class ReminderService:
    """
    Runs the notification steps against injected collaborators.

    Args:
        roster: RosterStore-like object
        notifier: send_direct/send_to_room/create_room/delete_room
        directory: is_user_active/does_user_exist
        image_provider: fetch_decoration_image(), optional
        state: CelebrationStateStore for channels and surveys
    """

    def __init__(
        self,
        roster,
        notifier,
        directory,
        image_provider=None,
        state: CelebrationStateStore = None,
        quotes: TemplatePool = None,
        anniversary_quotes: TemplatePool = None,
        channel_messages: TemplatePool = None,
        announcement_channel: str = BIRTHDAY_ANNOUNCEMENT_CHANNEL,
        logging_channel: str = BIRTHDAY_LOGGING_CHANNEL,
        create_channels: bool = CREATE_BIRTHDAY_CHANNELS,
        create_surveys: bool = CREATE_PITCHING_IN_SURVEYS,
        channel_ttl: int = BIRTHDAY_CHANNEL_TTL,
        channel_blacklist: List[str] = None,
        company_name: str = COMPANY_NAME,
        days_in_advance: int = NUMBER_OF_DAYS_IN_ADVANCE,
        advance_unit: str = BIRTHDAY_ANNOUNCEMENT_BEFORE_MODE,
    ):
        self.roster = roster
        self.notifier = notifier
        self.directory = directory
        self.image_provider = image_provider
        self.state = state if state is not None else CelebrationStateStore(path=None)
        self.quotes = quotes or TemplatePool(BIRTHDAY_QUOTES)
        self.anniversary_quotes = anniversary_quotes or TemplatePool(ANNIVERSARY_QUOTES)
        self.channel_messages = channel_messages or TemplatePool(BIRTHDAY_CHANNEL_MESSAGE)
        self.announcement_channel = announcement_channel
        self.logging_channel = logging_channel
        self.create_channels = create_channels
        self.create_surveys = create_surveys
        self.channel_ttl = channel_ttl
        self.channel_blacklist = (
            BIRTHDAY_CHANNEL_BLACKLIST if channel_blacklist is None else channel_blacklist
        )
        self.company_name = company_name
        self.days_in_advance = days_in_advance
        self.advance_unit = advance_unit

    # ----- helpers -----

    def _active(self, users) -> list:
        active = []
        for user in users:
            if self.directory.is_user_active(user.id):
                active.append(user)
            else:
                logger.info(f"REMINDER: Skipping inactive user {user.name} ({user.id})")
        return active

    def _decoration_image(self) -> Optional[str]:
        if self.image_provider is None:
            return None
        try:
            return self.image_provider.fetch_decoration_image()
        except Exception as e:
            logger.error(f"IMAGE_ERROR: Could not get a decoration image: {e}")
            return None

    # ----- step 1: congratulations -----

    def send_congratulations(self, today: date = None) -> bool:
        """Post today's birthdays to the announcement channel; the image is optional."""
        today = today or date.today()
        users = self._active(
            find_users_for_event(EventKind.BIRTHDAY, today, self.roster.list_users())
        )
        if not users:
            logger.info(f"CONGRATULATIONS: No birthdays on {today.isoformat()}")
            return False

        text = form_congratulation_message(users, self.quotes.random())
        image_url = self._decoration_image()
        if image_url:
            text = f"{image_url}\n{text}"

        self.notifier.send_to_room(self.announcement_channel, text)
        logger.info(
            f"CONGRATULATIONS: Celebrated {', '.join(user.name for user in users)}"
            + ("" if image_url else " without image")
        )
        return True

    def send_anniversary_congratulations(self, today: date = None) -> bool:
        today = today or date.today()
        users = self._active(
            find_users_for_event(EventKind.WORK_ANNIVERSARY, today, self.roster.list_users())
        )
        sentence = form_anniversary_message(users, today, self.company_name)
        if not sentence:
            return False

        text = f"Congratulations! Today {sentence}!\n{self.anniversary_quotes.next()}"
        self.notifier.send_to_room(self.announcement_channel, text)
        logger.info(f"ANNIVERSARY: Congratulated {', '.join(user.name for user in users)}")
        return True

    # ----- steps 2 and 3: advance reminders -----

    def send_reminders(
        self,
        amount_of_time: int = None,
        unit_of_time: str = None,
        today: date = None,
    ) -> int:
        """
        Send reminders of upcoming birthdays to everybody except the birthday people

        A birthday person still hears about the other people sharing the day.

        Returns:
            Number of direct reminders sent
        """
        if amount_of_time is None:
            amount_of_time = self.days_in_advance
        unit_of_time = unit_of_time or self.advance_unit
        today = today or date.today()
        target_day = target_date(today, amount_of_time, unit_of_time)
        all_users = self.roster.list_users()
        birthday_users = self._active(
            find_users_for_event(EventKind.BIRTHDAY, target_day, all_users)
        )
        if not birthday_users:
            return 0

        recipients = self._active(all_users)
        is_configured_window = (amount_of_time, unit_of_time) == (
            self.days_in_advance,
            self.advance_unit,
        )

        for user in birthday_users:
            if self.create_channels:
                self.create_birthday_channel(user, target_day, recipients)
            # A survey opened on the last day would have no time to collect answers
            if self.create_surveys and is_configured_window:
                self.open_pitching_in_survey(user, target_day, recipients, today)

        sent = 0
        for recipient in recipients:
            others = [user for user in birthday_users if user.id != recipient.id]
            if not others:
                continue
            message = form_reminder_message(others, target_day, amount_of_time, unit_of_time)
            if self.notifier.send_direct(recipient.id, message):
                sent += 1

        logger.info(
            f"REMINDER: Sent {sent} reminders about {target_day.isoformat()} "
            f"({amount_of_time} {unit_of_time} ahead)"
        )

        return sent

    def create_birthday_channel(self, user, event_date: date, members) -> Optional[str]:
        """
        Open a private channel for everyone except the birthday person

        Returns:
            Room ID, or None if the channel already existed or could not be created
        """
        state = self.state.get_or_create(user.id, event_date)
        if state.birthday_channel:
            return None

        member_ids = [
            member.id
            for member in members
            if member.id != user.id and member.name not in self.channel_blacklist
        ]
        now = datetime.now()
        room_name = (
            f"{user.name}-birthday-channel-{event_date.strftime('%d-%m')}"
            f"-id{now.microsecond // 1000}"
        )
        room_id = self.notifier.create_room(room_name, member_ids)
        if not room_id:
            logger.error(f"CHANNEL_ERROR: Could not create a birthday channel for {user.name}")
            return None

        state.birthday_channel = BirthdayChannel(room_name=room_name, room_id=room_id)
        self.state.save(state)
        self.notifier.send_to_room(room_id, render(self.channel_messages.next(), username=user.name))
        logger.info(f"CHANNEL: Opened {room_name} for {user.name}")
        return room_id

    def open_pitching_in_survey(self, user, event_date: date, recipients, today: date = None) -> bool:
        today = today or date.today()
        state = self.state.get_or_create(user.id, event_date)
        if state.pitching_in:
            return False

        state.pitching_in = PitchingInSurvey(opened_on=today.isoformat())
        self.state.save(state)

        question = MSG_PITCHING_IN_SURVEY.format(
            mention=user.mention,
            name=user.name,
            date=event_date.strftime(OUTPUT_SHORT_DATE_FORMAT),
        )
        for recipient in recipients:
            if recipient.id != user.id:
                self.notifier.send_direct(recipient.id, question)
        logger.info(f"SURVEY: Opened pitching-in survey for {user.name}")
        return True

    def record_pitching_in(self, birthday_user, responder_id: str, accepted: bool) -> bool:
        """
        Record a survey answer

        Returns:
            False when there is no open survey for the birthday person
        """
        state = self.state.get(birthday_user.id)
        if not state or not state.pitching_in or state.pitching_in.closed:
            return False
        state.pitching_in.record(responder_id, accepted)
        self.state.save(state)
        logger.info(
            f"SURVEY: {responder_id} {'joined' if accepted else 'declined'} "
            f"the present for {birthday_user.name}"
        )
        return True

    def close_pitching_in_survey(self, user, today: date = None) -> Optional[str]:
        """Post the survey result to the logging channel and stop accepting answers."""
        today = today or date.today()
        state = self.state.get(user.id)
        if not state or not state.pitching_in or state.pitching_in.closed:
            return None

        survey = state.pitching_in
        survey.closed = True
        self.state.save(state)

        names = []
        for user_id in survey.accepted:
            record = self.roster.get_user(user_id)
            names.append(record.mention if record else user_id)

        days_left = (state.event_date - today).days
        if days_left == 1:
            when = "tomorrow"
        elif days_left == 0:
            when = "today"
        else:
            when = f"on {state.event_date.strftime(OUTPUT_SHORT_DATE_FORMAT)}"

        if names:
            count = "1 person" if len(names) == 1 else f"{len(names)} people"
            summary = (
                f"{user.mention} is having a birthday {when}. "
                f"{count} pitched in for a present: {', '.join(names)}"
            )
        else:
            summary = f"{user.mention} is having a birthday {when}. Nobody pitched in for a present."

        self.notifier.send_to_room(self.logging_channel, summary)
        logger.info(f"SURVEY: Closed pitching-in survey for {user.name} ({len(names)} accepted)")
        return summary

    def close_due_pitching_in_surveys(self, today: date = None) -> int:
        """
        Close the surveys of people whose birthday is tomorrow or already here

        A survey is never closed on the tick that opened it, so with a one-day
        reminder window it stays open until the birthday itself.

        Returns:
            Number of surveys closed
        """
        today = today or date.today()
        closed = 0
        for state in self.state.all():
            survey = state.pitching_in
            if not survey or survey.closed:
                continue
            if (state.event_date - today).days > 1 or survey.opened_on == today.isoformat():
                continue

            user = self.roster.get_user(state.user_id)
            if user is None:
                logger.info(f"SURVEY: Dropping survey of unknown user {state.user_id}")
                survey.closed = True
                self.state.save(state)
                continue
            if self.close_pitching_in_survey(user, today):
                closed += 1
        return closed

    # ----- step 4: TTL sweep -----

    def remove_expired_birthday_channels(self, today: date = None) -> int:
        """
        Tear down channels and surveys whose birthday was BIRTHDAY_CHANNEL_TTL or more
        days ago

        Returns:
            Number of entries removed
        """
        today = today or date.today()
        removed = 0
        for state in self.state.all():
            if (today - state.event_date).days < self.channel_ttl:
                continue

            channel = state.birthday_channel
            if channel and channel.room_id:
                if not self.notifier.delete_room(channel.room_id):
                    logger.error(
                        f"CHANNEL_ERROR: Could not remove {channel.room_name}, retrying next tick"
                    )
                    continue
                logger.info(f"CHANNEL: Removed expired channel {channel.room_name}")
            self.state.remove(state.user_id)
            removed += 1
        return removed

    # ----- step 5: birthdayless users -----

    def detect_birthdayless_users(self) -> List:
        """
        Remind users without a date of birth to set it, and tell the logging channel

        Only users the directory confirms to exist and be active are included.
        """
        forgetful = []
        for user in self.roster.list_users():
            if user.date_of_birth:
                continue
            if self.directory.does_user_exist(user.id) and self.directory.is_user_active(user.id):
                forgetful.append(user)

        for user in forgetful:
            self.notifier.send_direct(user.id, MSG_BIRTHDAYLESS_REMINDER)

        if len(forgetful) > 1:
            user_list = "\n".join(f" {user.mention} " for user in forgetful)
            self.notifier.send_to_room(
                self.logging_channel,
                f"There are the users who did not set the date of birth:\n{user_list}",
            )
        elif forgetful:
            self.notifier.send_to_room(
                self.logging_channel, f"{forgetful[0].mention} did not set the date of birth."
            )

        if forgetful:
            logger.info(f"REMINDER: {len(forgetful)} users have no date of birth")
        return forgetful

    # ----- scheduler entry points -----

    def _run_step(self, name, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.error(f"CYCLE_ERROR: Step '{name}' failed: {e}")
            return None

    def run_congratulations(self, today: date = None):
        today = today or date.today()
        self._run_step("congratulations", self.send_congratulations, today)
        self._run_step("anniversaries", self.send_anniversary_congratulations, today)

    def run_reminders(self, today: date = None):
        today = today or date.today()
        self._run_step("advance reminders", self.send_reminders, today=today)
        if (self.days_in_advance, self.advance_unit) != (1, "days"):
            self._run_step("tomorrow reminders", self.send_reminders, 1, "days", today)
        self._run_step("pitching-in surveys", self.close_due_pitching_in_surveys, today)
        self._run_step("channel sweep", self.remove_expired_birthday_channels, today)
        self._run_step("birthdayless users", self.detect_birthdayless_users)

    def run_cycle(self, today: date = None):
        """Run every step of a notification tick in order."""
        today = today or date.today()
        self.run_congratulations(today)
        self.run_reminders(today)
