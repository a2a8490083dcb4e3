import os

from dotenv import load_dotenv

# Optional developer overrides; tests otherwise run on in-memory SQLite
env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=False)

# Must be set before libs.db.config builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("RESEND_API_KEY", "re_test_dummy")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")

from libs.common.config import get_settings  # noqa: E402

# Clear cached settings to reload with test env vars
get_settings.cache_clear()
