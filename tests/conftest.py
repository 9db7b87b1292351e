"""Shared test setup: headless Qt and an isolated config directory."""

import os
import tempfile

# Both must be set before Qt or the config module are imported
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ["FREECAD_AI_CHAT_DIR"] = tempfile.mkdtemp(prefix="freecad_ai_chat_")
