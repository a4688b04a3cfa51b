from fitcoach.plans.duplication.service import DuplicationService

__all__ = ["DuplicationService"]
