"""FreeCAD AI Chat Panel: GUI initialization."""

import FreeCADGui as Gui


class AIChatWorkbench(Gui.Workbench):
    """Workbench hosting the AI chat panel."""

    MenuText = "AI Chat"
    ToolTip = "Chat with an AI assistant about modeling in FreeCAD"

    def Initialize(self):
        """Called when the workbench is first activated."""
        import logging
        from freecad_ai_chat.config import get_config
        logging.getLogger("freecad_ai_chat").setLevel(get_config().log_level.upper())

        self.appendToolbar("AI Chat", ["FreeCADAIChat_Open"])
        self.appendMenu("AI Chat", ["FreeCADAIChat_Open"])

    def Activated(self):
        from freecad_ai_chat.ui.chat_panel import get_chat_dock
        dock = get_chat_dock()
        if dock:
            dock.show()

    def Deactivated(self):
        from freecad_ai_chat.ui.chat_panel import get_chat_dock
        dock = get_chat_dock(create=False)
        if dock:
            dock.hide()

    def GetClassName(self):
        return "Gui::PythonWorkbench"


class OpenChatCommand:
    """Command to open/show the AI chat panel."""

    def GetResources(self):
        from freecad_ai_chat.i18n import translate
        return {
            "MenuText": translate("OpenChatCommand", "Open AI Chat"),
            "ToolTip": translate("OpenChatCommand", "Open the AI assistant chat panel"),
        }

    def Activated(self, index=0):
        from freecad_ai_chat.ui.chat_panel import get_chat_dock
        dock = get_chat_dock()
        if dock:
            dock.show()
            dock.raise_()

    def IsActive(self):
        return True


Gui.addCommand("FreeCADAIChat_Open", OpenChatCommand())
Gui.addWorkbench(AIChatWorkbench())
