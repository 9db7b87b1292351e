"""Qt binding selection for the chat panel.

FreeCAD 1.0+ bundles PySide6; older builds ship PySide2. Everything in
the panel imports Qt through here.
"""

try:
    from PySide6 import QtCore, QtGui, QtWidgets  # noqa: F401
    PYSIDE_VERSION = 6
except ImportError:
    from PySide2 import QtCore, QtGui, QtWidgets  # noqa: F401
    PYSIDE_VERSION = 2

Signal = QtCore.Signal
Slot = QtCore.Slot
