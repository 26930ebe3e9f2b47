"""
Admin backend for gym organizations, their gyms and the devices assigned to them.
"""
