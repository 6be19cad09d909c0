import os

# Tests never pick up a developer's pattern file or admin token
os.environ.pop("UA_BLOCK_FILE", None)
os.environ.pop("ADMIN_TOKEN", None)
