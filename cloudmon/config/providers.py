"""
Provider Reference Data

Endpoints and fixed limits for each supported provider.
"""

# Zeabur (GraphQL, primary provider)
ZEABUR_GRAPHQL_URL = "https://api.zeabur.com/graphql"
FREE_QUOTA_LIMIT = 5.0  # USD per month

# Vercel
VERCEL_USER_URL = "https://api.vercel.com/v2/user"
VERCEL_PROJECTS_URL = "https://api.vercel.com/v9/projects"
VERCEL_PROJECT_LIMIT = 100

# Hugging Face
HUGGINGFACE_WHOAMI_URL = "https://huggingface.co/api/whoami-v2"
HUGGINGFACE_API_URL = "https://huggingface.co/api"
HUGGINGFACE_PAGE_SIZE = 100
HUGGINGFACE_MAX_PAGES = 5
HUGGINGFACE_REPO_KINDS = (
    # (response key, repo type, path)
    ("models", "model", "models"),
    ("spaces", "space", "spaces"),
    ("datasets", "dataset", "datasets"),
)

# Render
RENDER_OWNERS_URL = "https://api.render.com/v1/owners"
RENDER_SERVICES_URL = "https://api.render.com/v1/services"

# Railway (GraphQL)
RAILWAY_GRAPHQL_URL = "https://backboard.railway.app/graphql/v2"

# ClawCloud
CLAWCLOUD_PROJECTS_URL = "https://api.claw.cloud/v1/projects"

# Error message truncation
REASON_LIMIT = 200
COMBINED_REASON_LIMIT = 300

PROVIDER_ALIASES = {
    "hugging_face": "huggingface",
    "claw": "clawcloud",
}
