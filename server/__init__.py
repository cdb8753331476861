"""Socket.IO and HTTP surface for Card Rooms."""
