"""
User-facing reply strings and message pools for Birthder.

Pools are plain tuples; utils/templates.py wraps them with random and round-robin
selection.
"""

MSG_PERMISSION_DENIED = "Permission denied."
MSG_INVALID_DATE = "Invalid date format. Try again."
MSG_NO_RESULTS = "Oops... No results."
MSG_NO_USERS_ON_DATE = "Could not find any user with the specified date."

MSG_BIRTHDAYLESS_REMINDER = (
    "Hmm... \nIt looks like you forgot to set the date of birth. \n"
    "Please enter it (DD.MM.YYYY)."
)

MSG_WELCOME = (
    "Welcome to {company_name}! :tada:\n"
    "I'm the birthday bot. Please send me your date of birth (DD.MM.YYYY) "
    "so the team can celebrate with you."
)

MSG_PITCHING_IN_SURVEY = (
    "{mention} is having a birthday on {date}. Would you like to pitch in for a present?\n"
    "Reply `pitch in {name}` to join or `pitch out {name}` to skip."
)

BIRTHDAY_QUOTES = (
    "Hoping that your day will be as special as you are.",
    "Count your life by smiles, not tears. Count your age by friends, not years.",
    "May the years continue to be good to you. Happy Birthday!",
    "You're not getting older, you're getting better.",
    "May this year bring with it all the success and fulfillment your heart desires.",
    "Wishing you all the great things in life, hope this day will bring you an extra share "
    "of all that makes you happiest.",
    "Happy Birthday, and may all the wishes and dreams you dream today turn to reality.",
    "May this day bring to you all things that make you smile. Happy Birthday!",
    "Your best years are still ahead of you.",
    "Birthdays are filled with yesterday's memories, today's joys, and tomorrow's dreams.",
    "You'll always be forever young.",
    "Birthdays are good for you. Statistics show that people who have the most live the longest!",
    "I'm so glad you were born, because you brighten my life and fill it with joy.",
    "Always remember: growing old is mandatory, growing up is optional.",
    "Better to be over the hill than buried under it.",
    "You always have such fun birthdays, you should have one every year.",
    "We know we're getting old when the only thing we want for our birthday is not to be "
    "reminded of it.",
)

ANNIVERSARY_QUOTES = (
    "Thank you for your hard work and dedication!",
    "Here's to many more years of working together.",
    "Your contribution makes a difference every single day.",
    "Great things in business are never done by one person, they're done by a team.",
    "Another year of great work. Thank you for being part of the team!",
)
