"""
The MODEL layer contains the immutable mesh data and its derived geometry.
It has NO knowledge of random sources; the SAMPLING layer builds on it.
"""
