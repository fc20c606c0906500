"""WebRTC signaling relay with a live broadcaster directory."""
