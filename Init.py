"""FreeCAD AI Chat Panel: non-GUI initialization."""

import os
import sys

# FreeCAD exec's Init.py without setting __file__, so look the add-on up
# in the known Mod directories.
import FreeCAD

for _base in (FreeCAD.getUserAppDataDir(), FreeCAD.getResourceDir()):
    _mod_dir = os.path.join(_base, "Mod", "freecad-ai-chat")
    if os.path.isdir(_mod_dir):
        if _mod_dir not in sys.path:
            sys.path.append(_mod_dir)
        break
