APP_NAME = "Proposal Verifier"
APP_VERSION = "1.0.0"
DEFAULT_CORS_ALLOW_ORIGINS = [
	"http://localhost",
	"http://127.0.0.1",
	"http://localhost:3000",
]
DEFAULT_TRUSTED_HOSTS = [
	"127.0.0.1",
	"localhost",
	"testserver",
]

DEFAULT_IC_API_URL = "https://ic-api.internetcomputer.org/api/v3"
DEFAULT_DASHBOARD_URL = "https://dashboard.internetcomputer.org"
DEFAULT_GITHUB_WEB_URL = "https://github.com"
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_REPOSITORY = "dfinity/ic"
DEFAULT_SESSION_TTL_SECONDS = 6 * 60 * 60
PREVIEW_CHARS = 200

# Hosts known to serve documents without a relay in between.
DIRECT_FETCH_ALLOWED_HOSTS = frozenset(
	(
		"ic-api.internetcomputer.org",
		"api.github.com",
		"raw.githubusercontent.com",
		"dashboard.internetcomputer.org",
	)
)

TOPIC_KINDS = {
	"TOPIC_PROTOCOL_CANISTER_MANAGEMENT": "ProtocolCanisterManagement",
	"TOPIC_IC_OS_VERSION_DEPLOYMENT": "IcOsVersionDeployment",
	"TOPIC_PARTICIPANT_MANAGEMENT": "ParticipantManagement",
	"TOPIC_GOVERNANCE": "Governance",
}
