from arcade_backend.routes import cron, profile, scores, tournament

__all__ = ["cron", "profile", "scores", "tournament"]
