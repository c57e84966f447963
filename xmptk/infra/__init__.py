"""Infrastructure layer: native library access and the boundary bridge."""
