import pytest

from src.application.dto.folder_dto import CreateFolderDTO, UpdateFolderDTO
from src.domain.errors import ValidationError


def test_create_folder_dto_trims():
    dto = CreateFolderDTO(user_id="u1", name="  Utils ", description=" misc ")
    assert (dto.name, dto.description) == ("Utils", "misc")


def test_create_folder_dto_requires_name():
    with pytest.raises(ValidationError, match="Name is required"):
        CreateFolderDTO(user_id="u1", name=" ")


def test_update_folder_dto_changes():
    assert UpdateFolderDTO(user_id="u1", folder_id="f1", name="X").changes() == {"name": "X"}
    assert UpdateFolderDTO(user_id="u1", folder_id="f1").changes() == {}


def test_update_folder_dto_rejects_blank_name():
    with pytest.raises(ValidationError):
        UpdateFolderDTO(user_id="u1", folder_id="f1", name="")
