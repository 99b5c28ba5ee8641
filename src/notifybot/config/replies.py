START_COMMAND = "/start"

USAGE_EXAMPLE = "Example: 04.11.2023 08:00 Water the flowers"

START_REPLY = (
    "Hi there! It's notification bot. "
    "I'll notify you when it's time to do a task.\n"
    "Type info about your task: date, time, text.\n"
    + USAGE_EXAMPLE
)

SAVED_REPLY = (
    "Task has been saved. "
    "Rest assured you will get a notification message in the right time."
)

INVALID_DATETIME_REPLY = "Please look at the date and time, you have entered the incorrect value."

MALFORMED_REPLY = "Something went wrong.\n" + USAGE_EXAMPLE

NON_TEXT_REPLY = "I can only save text messages"

SAVE_FAILED_REPLY = "Sorry, I couldn't save your task right now. Please try again later."

__all__ = [
    "START_COMMAND", "USAGE_EXAMPLE",
    "START_REPLY", "SAVED_REPLY", "INVALID_DATETIME_REPLY",
    "MALFORMED_REPLY", "NON_TEXT_REPLY", "SAVE_FAILED_REPLY",
]
