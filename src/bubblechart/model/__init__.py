"""
The MODEL layer contains pure data structures and layout logic.
It has NO knowledge of the GUI (Qt) widgets.
It deals with bodies, scales, the viewport transform and label truncation.
"""
