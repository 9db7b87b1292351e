"""Translation helpers for the chat panel.

Strings go through Qt's translator, so the workbench's .qm files apply
once FreeCAD has installed them. Without a translator the source text
is returned unchanged.
"""

from .ui.compat import QtCore


def translate(context: str, text: str) -> str:
    return QtCore.QCoreApplication.translate(context, text)