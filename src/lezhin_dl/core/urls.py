from urllib.parse import urlparse

WEB_URL = "https://www.lezhin.com"
# CDN 서버의 origin URL
CDN_URL = "https://ccdn.lezhin.com"


# --- Web pages (rendered by the browser) ---

def login_url(language: str) -> str:
    return f"{WEB_URL}/{language}/login"


def locale_url(language: str, locale: str) -> str:
    return f"{WEB_URL}/{language}/locale/{locale}"


def comic_url(language: str, comic_name: str) -> str:
    return f"{WEB_URL}/{language}/comic/{comic_name}"


def episode_url(language: str, comic_name: str, episode_name: str) -> str:
    return f"{WEB_URL}/{language}/comic/{comic_name}/{episode_name}"


def expired_url(language: str) -> str:
    """Page the comic URL redirects to once the comic is out of service."""
    return f"{WEB_URL}/{language}/error/expired"


def library_comic_url(language: str, locale: str, comic_name: str) -> str:
    return f"{WEB_URL}/{language}/library/comic/{comic_name}?locale={locale}"


def library_episode_url(language: str, locale: str, comic_name: str, episode_name: str) -> str:
    return f"{WEB_URL}/{language}/library/comic/{comic_name}/{episode_name}?locale={locale}"


def same_path(url: str, other: str) -> bool:
    return urlparse(url).path == urlparse(other).path


# --- CDN resources (fetched without the browser) ---

def episode_info_url(comic_name: str, episode_name: str, access_token: str) -> str:
    return f"{CDN_URL}/episodes/{comic_name}/{episode_name}.json?access_token={access_token}"


def all_episodes_url(comic_name: str, access_token: str) -> str:
    return f"{CDN_URL}/episodes/{comic_name}?access_token={access_token}"


def image_url(comic_id: int, episode_id: int, index: int, image_format: str, access_token: str, purchased: bool) -> str:
    """
    e.g. https://ccdn.lezhin.com/v2/comics/5651768999542784/episodes/6393378955722752/contents/scrolls/1.webp?access_token=...&purchased=false&q=30
    """
    return (
        f"{CDN_URL}/v2/comics/{comic_id}/episodes/{episode_id}/contents/scrolls/{index}.{image_format}"
        f"?access_token={access_token}"
        # Without it, paid episodes are served narrower (1080px => 720px)
        f"&purchased={str(bool(purchased)).lower()}"
        # Meaning unknown; without it images are served narrower (1080px => 1024px)
        f"&q=30"
    )
