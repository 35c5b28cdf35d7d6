"""Static metadata describing Questify."""

APP_NAME = "Questify"
APP_VERSION = "0.1.0"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "Questify is a quiz and engagement platform. Administrators assign "
    "multiple-choice quizzes to classes and review response analytics; "
    "students answer assigned questions while response times are recorded."
)
