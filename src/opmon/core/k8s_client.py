import asyncio
import logging
import typing

from kubernetes_asyncio import client, config

logger = logging.getLogger(__name__)

# Global lock to prevent race conditions during config loading
_CONFIG_LOCK = asyncio.Lock()
_CONFIG_LOADED = False


async def ensure_k8s_config(config_file: typing.Optional[str] = None) -> bool:
    """
    Ensures that the Kubernetes configuration is loaded exactly once.

    Returns:
        bool: True if config was loaded successfully (or was already loaded), False otherwise.
    """
    global _CONFIG_LOADED

    if _CONFIG_LOADED:
        return True

    async with _CONFIG_LOCK:
        # Double-check locking pattern
        if _CONFIG_LOADED:
            return True

        # An explicit kubeconfig wins over in-cluster credentials
        if not config_file:
            try:
                logger.debug("Attempting to load in-cluster Kubernetes config...")
                config.load_incluster_config()
                logger.info("Loaded in-cluster Kubernetes configuration.")
                _CONFIG_LOADED = True
                return True
            except config.ConfigException:
                logger.debug("In-cluster config not found.")
            except Exception as e:
                logger.warning(f"Unexpected error loading in-cluster config: {e}")

        try:
            logger.debug("Attempting to load kubeconfig %s...", config_file or "(default)")
            await config.load_kube_config(config_file=config_file)
            logger.info("Loaded Kubernetes configuration from kubeconfig file.")
            _CONFIG_LOADED = True
            return True
        except config.ConfigException:
            logger.warning("Could not find kubeconfig file.")
        except Exception as e:
            logger.warning(f"Unexpected error loading kubeconfig: {e}")

    logger.warning("Failed to load any Kubernetes configuration.")
    return False


def reset_k8s_config() -> None:
    """Forgets the loaded state so the next call reloads configuration."""
    global _CONFIG_LOADED
    _CONFIG_LOADED = False


async def get_api_client(config_file: typing.Optional[str] = None) -> typing.Optional[client.ApiClient]:
    """
    Returns a configured ApiClient, or None when no cluster session is available.
    """
    if await ensure_k8s_config(config_file):
        return client.ApiClient()
    return None
