"""Reports module: anonymous issue reports e-mailed to admins."""
