"""
Test suite for photogallery application.

This module contains all test cases for the application:
- Unit tests for models, services, the controller and UI handlers
- Integration tests for the gallery flow against a real metadata store
"""
