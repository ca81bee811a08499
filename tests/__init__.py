"""
Test suite for the video pair relay.

Tests are organized by type:
- unit/ for individual components
- integration/ for the router over real loopback sockets
"""
