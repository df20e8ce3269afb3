# Services package init
"""
ImageVault Backend — Services Layer

Service Inventory:
    - UploadService: streams the `image` part to disk, resolves stored files
    - ImageService:  create / list / get / update against the images collection
"""
