"""
Record form widgets: the form itself, its fields and the create/edit mode controller.
"""
