from . import lorebook_service

def init_app(app, context):
    context.session = None
