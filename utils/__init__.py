"""
utils package
~~~~~~~~~~~~~
Page sources, the image cache, key bindings and shared constants.
"""
