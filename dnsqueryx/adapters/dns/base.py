from abc import ABC, abstractmethod


class AbstractResolver(ABC):
	"""Interface for asynchronous address-record resolvers."""

	@abstractmethod
	async def lookup_ip(self, domain: str) -> list[str]:
		"""Resolve a domain name to its IP addresses.

		Args:
			domain: Name to resolve, used exactly as given.

		Returns:
			list[str]: Addresses in the order the resolver returned them.

		Raises:
			ResolutionAppError: If the lookup fails for any reason (no such
				name, no answer, timeout, transport error, malformed name).
		"""
		...
