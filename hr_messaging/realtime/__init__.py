"""Realtime delivery (Socket.IO).

One socket server is shared by every feature that pushes to connected
employees; domain modules only publish through ``events``.
"""
