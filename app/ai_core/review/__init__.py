from app.ai_core.review.pr_reviewer import PRReviewer, ReviewGenerationError

__all__ = ["PRReviewer", "ReviewGenerationError"]
