"""
The SAMPLING layer turns uniform random draws into points on a SurfaceModel.
"""
