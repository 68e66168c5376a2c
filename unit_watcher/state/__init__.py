from unit_watcher.state.store import PersistedState, StateStore

__all__ = ["PersistedState", "StateStore"]
