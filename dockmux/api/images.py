"""
Docker Images API
"""

import json
import logging
from typing import List, Dict, Any, Optional, Callable

from .exceptions import APIError, ImageNotFound, NotFound

logger = logging.getLogger(__name__)


class Image:
    """Docker Image object"""

    def __init__(self, attrs: Dict[str, Any], client):
        self.attrs = attrs
        self.client = client
        self.id = attrs.get('Id', '')
        self.short_id = self.id.split(':', 1)[-1][:12] if self.id else ''
        self.tags = attrs.get('RepoTags') or []

    def __repr__(self):
        return f"<Image: {self.tags[0] if self.tags else self.short_id}>"

    def history(self) -> List[Dict[str, Any]]:
        """Layer history of this image"""
        return self.client.history(self.id)

    def tag(self, repository: str, tag: Optional[str] = None) -> bool:
        """Tag this image into a repository"""
        return self.client.tag(self.id, repository, tag=tag)

    def remove(self, force: bool = False, noprune: bool = False):
        """Remove this image"""
        return self.client.remove(self.id, force=force, noprune=noprune)


class ImageCollection:
    """Docker Images collection"""

    def __init__(self, client):
        self.client = client

    def list(self, name: Optional[str] = None, all: bool = False,
             filters: Optional[Dict[str, Any]] = None) -> List[Image]:
        """
        List images

        Args:
            name: Filter by image name
            all: Show all images (including intermediates)
            filters: Filters to apply

        Returns:
            List of Image objects
        """
        params = {'all': all, 'filters': filters or None}

        images_data = self.client.http.get('/images/json', params=params)
        images = [Image(img_data, self) for img_data in images_data or []]

        if name:
            images = [img for img in images if any(name in tag for tag in img.tags)]

        return images

    def get(self, name: str) -> Image:
        """
        Get image by name or ID

        Raises:
            ImageNotFound: If image not found
        """
        try:
            image_data = self.client.http.get(f'/images/{name}/json')
        except NotFound as e:
            raise ImageNotFound(f"Image not found: {name}",
                                response=e.response, status_code=e.status_code) from e
        return Image(image_data, self)

    def pull(self, repository: str, tag: str = 'latest', platform: Optional[str] = None,
             callback: Optional[Callable[[Dict[str, Any]], None]] = None) -> Image:
        """
        Pull image from registry

        Args:
            repository: Repository name
            tag: Image tag
            platform: Platform (e.g., linux/amd64)
            callback: Called with every progress message

        Returns:
            Image object

        Raises:
            APIError: If the daemon reports an error while pulling
        """
        params = {'fromImage': repository, 'tag': tag, 'platform': platform}

        with self.client.http.post('/images/create', params=params, stream=True, timeout=None) as response:
            for line in response:
                line = line.strip()
                if not line:
                    continue

                try:
                    progress = json.loads(line.decode('utf-8'))
                except (json.JSONDecodeError, UnicodeDecodeError):
                    logger.debug(f"Pull {repository}: {line!r}")
                    continue

                if 'error' in progress:
                    error_msg = progress.get('errorDetail', {}).get('message', progress['error'])
                    raise APIError(f"Pull failed: {error_msg}")

                logger.debug(f"Pull {repository}:{tag}: {progress.get('status', '')} {progress.get('progress', '')}")
                if callback:
                    callback(progress)

        logger.info(f"Image pulled: {repository}:{tag}")
        return self.get(f"{repository}:{tag}")

    def history(self, image: str) -> List[Dict[str, Any]]:
        """
        Get image layer history

        Returns:
            List of layers, newest first
        """
        return self.client.http.get(f'/images/{image}/history', errors={404: ImageNotFound})

    def tag(self, image: str, repository: str, tag: Optional[str] = None) -> bool:
        """
        Tag an image into a repository

        Args:
            image: Image name or ID
            repository: Target repository, e.g. 'registry.local/app'
            tag: Target tag (default: latest)

        Returns:
            True once tagged
        """
        self.client.http.post(
            f'/images/{image}/tag',
            params={'repo': repository, 'tag': tag},
            errors={404: ImageNotFound}
        )
        logger.info(f"Image {image} tagged as {repository}:{tag or 'latest'}")
        return True

    def remove(self, image: str, force: bool = False, noprune: bool = False) -> List[Dict[str, str]]:
        """
        Remove image

        Args:
            image: Image name or ID
            force: Force removal
            noprune: Don't delete untagged parents
        """
        params = {'force': force, 'noprune': noprune}
        return self.client.http.delete(f'/images/{image}', params=params, errors={404: ImageNotFound})

    def prune(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Remove unused images

        Returns:
            Dict with ImagesDeleted and SpaceReclaimed
        """
        return self.client.http.post('/images/prune', params={'filters': filters or None})
