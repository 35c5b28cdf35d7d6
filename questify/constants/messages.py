"""User-visible message strings used across the core."""

SELECT_ANSWER_MESSAGE: str = "Please select an answer"
INVALID_OPTION_MESSAGE: str = "Selected option is not available for this question"
QUIZ_ALREADY_COMPLETED_MESSAGE: str = (
    "This quiz has already been completed. You cannot attempt it again."
)
NO_ACTIVE_QUIZ_MESSAGE: str = "No quiz is in progress."
SUBMISSION_IN_PROGRESS_MESSAGE: str = "An answer is already being submitted."

LOAD_ASSIGNMENTS_FAILED: str = "Failed to load assignments"
SUBMIT_ANSWER_FAILED: str = "Failed to submit answer"
LOAD_LEADERBOARD_FAILED: str = "Failed to load leaderboard"
LOAD_RESPONSES_FAILED: str = "Failed to load responses"
EXPORT_FAILED: str = "Failed to export responses"
LOGIN_FAILED: str = "Login failed"
REGISTRATION_FAILED: str = "Registration failed"
GET_USER_FAILED: str = "Failed to get user"
REQUEST_FAILED: str = "Request failed"
REQUEST_TIMED_OUT: str = "The server took too long to respond. Please try again."
NETWORK_UNAVAILABLE: str = "Unable to reach the server. Check your connection."
UNEXPECTED_RESPONSE: str = "Unexpected response from server"

EMAIL_REQUIRED: str = "Email is required"
PASSWORD_REQUIRED: str = "Password is required"
NAME_REQUIRED: str = "Name is required"
INVALID_EMAIL: str = "Please enter a valid email address"
PASSWORD_TOO_SHORT: str = "Password must be at least 6 characters"
PASSWORDS_DO_NOT_MATCH: str = "Passwords do not match"

QUIZ_ACTIVE_MESSAGE: str = "Finish or quit the current quiz first."
NO_QUESTIONS_LEFT_MESSAGE: str = "This quiz has no questions left to answer."
UNKNOWN_QUESTION_MESSAGE: str = "That question is not part of the current quiz."
