from dropshare.services.link_creation import LinkCreationService, CreateLinkResult
from dropshare.services.link_resolution import LinkResolutionService, ResolvedShare
from dropshare.services.validation import parse_create_link_request, validate_files


__all__ = [
    'LinkCreationService',
    'CreateLinkResult',
    'LinkResolutionService',
    'ResolvedShare',
    'parse_create_link_request',
    'validate_files',
]
