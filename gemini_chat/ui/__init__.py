"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Chat history display with image attachments
    - Text, image and voice input
    - Clearing the user's history

Contains minimal business logic. Turns are run by the chat orchestrator.
"""
