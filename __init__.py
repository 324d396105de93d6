# arena_copilot/__init__.py

from dotenv import load_dotenv

# Load .env file at module import time
# This makes COPILOT_API_KEY and others available everywhere
load_dotenv()
