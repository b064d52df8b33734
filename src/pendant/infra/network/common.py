from __future__ import annotations

USER_AGENT = "pendant-cli/0.2.0"
DEFAULT_TIMEOUT = 10

GITHUB_OWNER = "JohnnyMorganz"
GITHUB_REPO = "luau-lsp"
