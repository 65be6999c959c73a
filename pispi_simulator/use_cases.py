"""
Account Use Cases

Application-level façade over the account domain service. Every use case
applies the same input preconditions, logs its outcome and returns plain
JSON-ready records. Domain errors pass through unchanged; anything else is
surfaced as an InternalInconsistency.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from .accounts import AccountStore, is_valid_account_number
from .aliases import AliasStore, is_valid_alias_key
from .config import SimulatorConfig, get_config
from .errors import DomainError, Entity, InternalInconsistency, NotFound, ValidationFailed
from .logging_config import get_logger, log_action
from .service import AccountService
from .transactions import TransactionQuery, TransactionStore


class AccountUseCases:
    """Use cases of the Comptes module"""

    def __init__(self, service: AccountService, default_motif: str = "Transfert intra-comptes",
                 default_page_size: int = 20):
        self.service = service
        self.default_motif = default_motif
        self.default_page_size = default_page_size
        self.logger = get_logger("pispi.use_cases")

    @classmethod
    def default(cls, config: Optional[SimulatorConfig] = None) -> 'AccountUseCases':
        """Build the use cases over freshly seeded stores"""
        config = config or get_config()
        service = AccountService(
            AccountStore.seeded(),
            AliasStore.seeded(config.alias_working_set, config.alias_retained_on_overflow),
            TransactionStore.seeded(),
            max_aliases=config.max_aliases_per_account,
        )
        return cls(service, config.default_motif, config.default_page_size)

    @contextmanager
    def _use_case(self, action: str, **context):
        try:
            yield
        except DomainError as e:
            log_action(
                self.logger, "warning", f"{action} refused: {e.message}",
                action=action, extra={"kind": e.kind.value, **context}
            )
            raise
        except Exception as e:
            log_action(
                self.logger, "error", f"{action} failed unexpectedly",
                action=action, extra=context, exc_info=True
            )
            raise InternalInconsistency(f"{action} failed: {e}") from e

    @staticmethod
    def _check_account_number(numero: Any) -> None:
        if not is_valid_account_number(numero):
            raise ValidationFailed.single(
                "numero", "Le numéro de compte doit respecter le format CIC[0-9]+"
            )

    def consult_balance(self, numero: str) -> Dict[str, Any]:
        """Balance snapshot stamped with the consultation time"""
        with self._use_case("consult_balance", numero=numero):
            self._check_account_number(numero)
            account = self.service.get_account(numero)
            if account is None:
                raise NotFound(Entity.ACCOUNT, numero)
            result = account.to_dict()
            result["dateConsultation"] = datetime.now(timezone.utc).isoformat()
            log_action(self.logger, "info", "Balance consulted",
                       action="consult_balance", resource=f"compte:{numero}")
            return result

    def list_transactions(self, page: int = 1, size: Optional[int] = None,
                          sort: Optional[str] = None, statut: Optional[str] = None) -> Dict[str, Any]:
        with self._use_case("list_transactions", page=page, size=size, sort=sort, statut=statut):
            query = TransactionQuery(
                page=page,
                size=self.default_page_size if size is None else size,
                sort=sort or "-dateCreation",
                statut=statut or None,
            )
            result = self.service.get_transactions(query).to_dict()
            log_action(self.logger, "info", "Transactions listed", action="list_transactions",
                       extra={"page": query.page, "size": query.size, "count": len(result["data"])})
            return result

    def create_transfer(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Record a transfer; an empty or missing motif gets the default label"""
        data = dict(payload)
        if data.get("motif") in (None, ""):
            data["motif"] = self.default_motif

        with self._use_case("create_transfer", compteDebiteur=data.get("compteDebiteur"),
                            compteCrediteur=data.get("compteCrediteur"), montant=data.get("montant")):
            return self.service.create_transaction(data).to_dict()

    def list_aliases(self, numero: str) -> List[Dict[str, Any]]:
        with self._use_case("list_aliases", numero=numero):
            self._check_account_number(numero)
            return [alias.to_dict() for alias in self.service.get_alias(numero)]

    def create_alias(self, numero: str, alias_type: Any) -> Dict[str, Any]:
        with self._use_case("create_alias", numero=numero, type=alias_type):
            self._check_account_number(numero)
            return self.service.create_alias(numero, alias_type).to_dict()

    def delete_alias(self, numero: str, cle: str) -> None:
        """Delete an alias; a missing alias is reported as NotFound on the key"""
        with self._use_case("delete_alias", numero=numero, cle=cle):
            self._check_account_number(numero)
            if not is_valid_alias_key(cle):
                raise ValidationFailed.single("cle", "La clé d'alias doit être un UUID v4 valide")
            if not self.service.delete_alias(numero, cle):
                raise NotFound(
                    Entity.ALIAS, cle,
                    f"L'alias {cle} n'existe pas pour le compte {numero}"
                )
