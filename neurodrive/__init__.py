"""
Neuroevolution trainer for 2D driving policies.
"""
