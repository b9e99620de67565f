from herbscan.presentation.store import OutcomeStore
from herbscan.presentation.presenter import RenderedView, ResultPresenter, ViewSection

__all__ = ["OutcomeStore", "RenderedView", "ResultPresenter", "ViewSection"]
