"""
Client de la source de contenu : site d'index + hebergeur de fichiers Febbox.

Implemente IContentSource. Le client ne fait qu'une tentative par appel :
le retry et le pacing sont geres par le pool de workers, qui decide a partir
de l'ErrorKind porte par l'exception.

Endpoints utilises :
- <index>/{movie|tv}?page=N                      -> HTML, .film_list-wrap .flw-item
- <index>/index/share_link?id=&type=1|2          -> JSON data.link
- <share_link>                                   -> HTML, .f_list_scroll div[data-id]
- <host>/file/file_share_list?share_key=&parent_id= -> JSON data.file_list
- <host>/file/file_info?fid=                     -> JSON data.file
- <host>/console/video_quality_list?fid=         -> JSON html (.file_quality)
"""

from typing import Any, Optional
from urllib.parse import quote

import httpx
from bs4 import BeautifulSoup
from loguru import logger

from src.adapters.api.retry import send
from src.core.entities.catalog import AnyTitle, File, Link, TitleKind, title_class
from src.core.errors import SchemaError
from src.core.ports.content_source import IContentSource
from src.core.value_objects import RawFile
from src.utils.helpers import clean_title, parse_size_mb


class FebboxClient(IContentSource):
    """
    Client HTTP (httpx + BeautifulSoup) du site d'index et de l'hebergeur.

    Attributes:
        index_base_url: URL de base du site d'index
        file_host_base_url: URL de base de l'hebergeur de fichiers
        proxy_url: Prefixe de proxy optionnel (l'URL cible est encodee a la suite)
    """

    def __init__(
        self,
        index_base_url: str,
        file_host_base_url: str,
        proxy_url: str = "",
        cookie: str = "",
        user_agent: str = "",
        timeout: float = 120.0,
    ) -> None:
        self.index_base_url = index_base_url.rstrip("/")
        self.file_host_base_url = file_host_base_url.rstrip("/")
        self.proxy_url = proxy_url
        self._cookie = cookie
        self._user_agent = user_agent
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Retourne le client HTTP, le cree si necessaire (lazy init)."""
        if self._client is None or self._client.is_closed:
            headers = {}
            if self._user_agent:
                headers["User-Agent"] = self._user_agent
            if self._cookie:
                headers["Cookie"] = self._cookie
            self._client = httpx.AsyncClient(
                headers=headers,
                timeout=self._timeout,
                follow_redirects=True,
            )
        return self._client

    def _target(self, url: str) -> str:
        """Applique le prefixe de proxy si configure."""
        if self.proxy_url:
            return f"{self.proxy_url}{quote(url, safe='')}"
        return url

    async def _get(self, url: str, params: Optional[dict[str, Any]] = None) -> httpx.Response:
        if params:
            url = str(httpx.URL(url, params=params))
        logger.debug(f"GET {url}")
        return await send(self._get_client(), "GET", self._target(url))

    async def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> dict:
        response = await self._get(url, params)
        try:
            data = response.json()
        except ValueError as e:
            raise SchemaError(f"Invalid JSON from {url}: {e}") from e
        if not isinstance(data, dict):
            raise SchemaError(f"Unexpected JSON payload from {url}")
        return data

    async def fetch_index_page(self, kind: TitleKind, page: int) -> list[AnyTitle]:
        """
        Liste les titres d'une page d'index.

        L'ID local est le dernier segment du lien du titre ; les blocs
        "titres similaires" (.film_related) sont ignores.
        """
        url = f"{self.index_base_url}/{kind.value}"
        response = await self._get(url, {"page": page})
        soup = BeautifulSoup(response.text, "html.parser")

        cls = title_class(kind)
        titles = []
        for item in soup.select(".film_list-wrap .flw-item"):
            if item.find_parent(class_="film_related") is not None:
                continue
            anchor = item.select_one(".film-name a")
            if anchor is None or not anchor.get("href"):
                continue
            local_id = anchor["href"].rstrip("/").rsplit("/", 1)[-1]
            name = clean_title(anchor.get("title") or anchor.get_text())
            desc_node = item.select_one(".description")
            description = desc_node.get_text(" ", strip=True) if desc_node else ""
            titles.append(cls(local_id=local_id, title=name, description=description))

        logger.debug(f"Page d'index {kind.value} #{page}: {len(titles)} titre(s)")
        return titles

    async def resolve_share_link(self, local_id: str, kind: TitleKind) -> str:
        data = await self._get_json(
            f"{self.index_base_url}/index/share_link",
            {"id": local_id, "type": kind.content_type},
        )
        link = (data.get("data") or {}).get("link")
        if not link:
            raise SchemaError(f"No share link for {kind.value} {local_id}")
        return link

    async def list_share_nodes(self, share_link: str) -> list[RawFile]:
        """
        Noeuds de la page de partage.

        Pour un film ce sont les fichiers, pour une serie les dossiers de
        saison (le nom du noeud devient le nom de la saison).
        """
        response = await self._get(share_link)
        soup = BeautifulSoup(response.text, "html.parser")

        nodes = []
        for div in soup.select(".f_list_scroll div[data-id]"):
            raw_id = div.get("data-id", "").strip()
            if not raw_id.isdigit():
                logger.debug(f"Noeud ignore (data-id invalide): {raw_id!r}")
                continue
            name_node = div.select_one("p.file_name")
            size_node = div.select_one(".file_size")
            nodes.append(
                RawFile(
                    file_id=int(raw_id),
                    file_name=name_node.get_text(strip=True) if name_node else "",
                    size=size_node.get_text(strip=True) if size_node else "",
                )
            )
        return nodes

    async def list_folder_files(self, share_key: str, parent_id: int) -> list[RawFile]:
        data = await self._get_json(
            f"{self.file_host_base_url}/file/file_share_list",
            {"share_key": share_key, "pwd": "", "parent_id": parent_id, "is_html": 0},
        )
        if data.get("code") != 1:
            raise SchemaError(
                f"File host error for {share_key}/{parent_id}: "
                f"{data.get('msg', '')} (code: {data.get('code')})"
            )

        files = []
        for item in (data.get("data") or {}).get("file_list") or []:
            try:
                fid = int(item["fid"])
            except (KeyError, TypeError, ValueError) as e:
                raise SchemaError(f"Malformed file entry in {share_key}: {item!r}") from e
            size_bytes = item.get("file_size_bytes")
            files.append(
                RawFile(
                    file_id=fid,
                    file_name=item.get("file_name") or "",
                    size=item.get("file_size") or "",
                    size_bytes=int(size_bytes) if size_bytes else None,
                    thumb_url=item.get("thumb") or "",
                )
            )
        return files

    async def get_file_info(self, file_id: int) -> File:
        data = await self._get_json(
            f"{self.file_host_base_url}/file/file_info", {"fid": file_id}
        )
        info = (data.get("data") or {}).get("file") or {}
        if not info.get("fid"):
            raise SchemaError(f"Invalid or empty file data for fid {file_id}")
        size = info.get("size") or ""
        return File(
            file_id=int(info["fid"]),
            file_name=info.get("file_name") or "",
            size=size,
            size_mb=parse_size_mb(size),
            thumb_url=info.get("thumb_big") or "",
        )

    async def get_qualities(self, file_id: int) -> list[Link]:
        data = await self._get_json(
            f"{self.file_host_base_url}/console/video_quality_list", {"fid": file_id}
        )
        html = data.get("html")
        if not isinstance(html, str):
            raise SchemaError(f"No quality list for fid {file_id}")

        soup = BeautifulSoup(html, "html.parser")
        links = []
        for node in soup.select(".file_quality"):
            size_node = node.select_one(".desc .size")
            links.append(
                Link(
                    quality=node.get("data-quality", ""),
                    url=node.get("data-url", ""),
                    size=size_node.get_text(strip=True) if size_node else "",
                )
            )
        return links

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
