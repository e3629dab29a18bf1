# Services package init
"""
Cyber Kitchen Backend — Services Layer
========================================

What:  Business logic layer sitting between routes (HTTP) and the filesystem.
How:   Services accept plain values, apply the rules, and return results or
       raise application exceptions. Routes receive them through FastAPI
       dependencies so tests can swap them out.

Service Inventory:
    - RecipeRepository (abstract): Interface for recipe collection storage
    - JsonFileRecipeRepository: The collection as one JSON file
    - MediaManager: Folder/file tree under the media root, with containment checks
    - UploadService: Stores uploaded images with generated filenames
    - RecipeImporter: JSON-LD scraping, normalization, image download
"""
