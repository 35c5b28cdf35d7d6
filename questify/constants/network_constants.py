"""Network configuration constants for the Questify client and dev backend."""

DEFAULT_API_URL: str = "http://localhost:3000/api"
DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 3000
REQUEST_TIMEOUT_SECONDS: float = 20.0
