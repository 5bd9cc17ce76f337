# backend/dependencies.py

"""
The one preparation session the app serves.

The HTTP routes and the Gradio handlers both act on this PrepManager, so a
quiz regenerated through `/api/quiz/refresh` is the quiz the UI shows next.
Tests swap it out through `app.dependency_overrides[get_prep_manager]`.
"""

from backend.prep_manager import PrepManager

prep_manager = PrepManager()


def get_prep_manager() -> PrepManager:
    return prep_manager
