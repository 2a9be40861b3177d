from textual.message import Message


class StateChangedMessage(Message):
    """
    Fired after any AppState action.
    The app re-syncs the visible modal with nav.modal and refreshes the listing.

    Post it at App level: messages posted from a modal do not reach the
    screen underneath it.
    """

    bubble = True


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True
