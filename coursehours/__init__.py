"""
coursehours – teaching hours dashboard built from a calendar export.
"""
