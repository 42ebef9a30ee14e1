from .tournament_window import TournamentWindowState, derive_window_state, requires_action

__all__ = ["TournamentWindowState", "derive_window_state", "requires_action"]
