class VisualizerError(Exception):
    """Base class for every error the visualizer reports to the user."""


class ConfigError(VisualizerError):
    pass


class DecodeError(VisualizerError):
    pass


class SetupError(VisualizerError):
    """Something needed before playback could start is unavailable."""


class PlaybackError(SetupError):
    pass


class TerminalError(SetupError):
    pass
