"""
Application core: settings shared by the API and the services.
"""
