from luxgrid.project.io import load_project, project_from_dict, save_project
from luxgrid.project.schema import LuminaireSpec, Project, ProjectError, RoomSpec

__all__ = [
    "LuminaireSpec",
    "Project",
    "ProjectError",
    "RoomSpec",
    "load_project",
    "project_from_dict",
    "save_project",
]
