"""Practice pod: melody generation, notation layout and playback."""
