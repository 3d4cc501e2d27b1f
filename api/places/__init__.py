"""
Places catalog and the place <-> owner consistency rules.
"""
