# Domain services. Import from the submodules (app.services.project_service, ...);
# the schemas import app.services.progress, so nothing is re-exported here.
