import docker
from fastapi import APIRouter, Depends, Query

from apis.deps import get_docker, to_http_error
from engine.errors import SandboxError
from engine.images import ImageProvisioner, image_for_language
from schemas.code import ImageRequest, ImageStatus, Language

router = APIRouter()


@router.get("/status", response_model=ImageStatus, response_model_exclude_none=True)
async def image_status(language: str = Query(...), client: docker.DockerClient = Depends(get_docker)) -> ImageStatus:
    try:
        image = image_for_language(language)
        present = await ImageProvisioner(client).is_present(image)
    except SandboxError as e:
        raise to_http_error(e)
    return ImageStatus(present=present, image=image, language=language)


@router.post("/pull", response_model=ImageStatus, response_model_exclude_none=True)
async def pull_image(request: ImageRequest, client: docker.DockerClient = Depends(get_docker)) -> ImageStatus:
    images = ImageProvisioner(client)
    try:
        image = image_for_language(request.language)
        pulled = await images.pull(image)
        # judged runs also need the marker's JVM image
        marker_image = image_for_language(Language.JAVA)
        if marker_image != image:
            await images.ensure_available(marker_image)
    except SandboxError as e:
        raise to_http_error(e)
    return ImageStatus(present=True, image=image, language=request.language, pulled=pulled)
