"""Qt/QML desktop shell for the board client."""
