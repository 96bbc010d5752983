import hashlib

import structlog

from fortune_backend.domain.analytics import FortuneStats, compute_stats
from fortune_backend.domain.auth import hash_password, verify_password
from fortune_backend.domain.entities import (
    FortuneQuery,
    FortuneRecord,
    UserData,
    normalize_email,
)
from fortune_backend.domain.errors import (
    AdminPasswordNotConfigured,
    DuplicateEmailError,
    FortuneAlreadyExists,
    InvalidPasswordError,
    PasswordPolicyError,
)
from fortune_backend.domain.export import records_to_csv
from fortune_backend.domain.fortune_generator import FortuneGenerator

log = structlog.get_logger(__name__)


def email_digest(email: str) -> str:
    """Empreinte courte d'un email, utilisable dans les logs à la place de l'adresse."""
    return hashlib.sha256(normalize_email(email).encode("utf-8")).hexdigest()[:12]


class FortuneService:
    """Service métier côté utilisateur : une seule fortune par email.

    Responsabilités:
    - Retrouver la fortune déjà stockée pour un email.
    - Générer puis persister une fortune pour un email inconnu.
    - Ne jamais régénérer une fortune existante.
    """

    def __init__(self, generator: FortuneGenerator, fortune_repo):
        """Initialise le service avec ses dépendances.

        Paramètres:
        - generator: `FortuneGenerator` configuré avec les tables de messages.
        - fortune_repo: dépôt de fortunes (SQL ou en mémoire).
        """
        self.generator = generator
        self.fortunes = fortune_repo

    def check_email(self, email: str) -> FortuneRecord | None:
        """Retourne la fortune stockée pour cet email, ou None."""
        return self.fortunes.get_by_email(normalize_email(email))

    def submit(self, user_data: UserData) -> FortuneRecord:
        """Génère et enregistre la fortune d'un nouvel email.

        Raises:
            FortuneAlreadyExists: l'email possède déjà une fortune (portée par l'exception).
        """
        user_data = user_data.model_copy(update={"email": normalize_email(user_data.email)})
        existing = self.fortunes.get_by_email(user_data.email)
        if existing is not None:
            log.info("fortune_exists", email=email_digest(user_data.email))
            raise FortuneAlreadyExists(existing)

        fortune = self.generator.generate(user_data)
        try:
            record = self.fortunes.save(user_data, fortune)
        except DuplicateEmailError as err:
            # soumission concurrente : la première écriture gagne
            winner = self.fortunes.get_by_email(user_data.email)
            if winner is None:
                raise
            raise FortuneAlreadyExists(winner) from err
        log.info(
            "fortune_saved",
            id=record.id,
            email=email_digest(user_data.email),
            lucky_number=fortune.lucky_number,
        )
        return record


class AdminService:
    """Opérations du tableau de bord administrateur.

    Le hash du mot de passe est résolu dans cet ordre : configuration persistée, puis
    `bootstrap_hash`, puis `bootstrap_password` (haché et persisté à la première utilisation).
    """

    def __init__(
        self,
        fortune_repo,
        admin_config_repo,
        password_min_length: int = 6,
        bootstrap_password: str | None = None,
        bootstrap_hash: str | None = None,
    ):
        self.fortunes = fortune_repo
        self.admin_config = admin_config_repo
        self.password_min_length = password_min_length
        self.bootstrap_password = bootstrap_password
        self.bootstrap_hash = bootstrap_hash

    # --- données ---

    def list_fortunes(self, query: FortuneQuery) -> tuple[list[FortuneRecord], int]:
        """Page de fortunes et nombre total correspondant aux filtres."""
        return self.fortunes.list(query), self.fortunes.count(query)

    def recent(self, limit: int = 10) -> list[FortuneRecord]:
        """Dernières fortunes générées."""
        return self.fortunes.list(FortuneQuery(limit=limit))

    def delete(self, fortune_id: str) -> bool:
        """Supprime une fortune ; False si l'identifiant est inconnu."""
        deleted = self.fortunes.delete(fortune_id)
        log.info("fortune_deleted", id=fortune_id, found=deleted)
        return deleted

    def clear_all(self) -> int:
        """Supprime toutes les fortunes et retourne le nombre de lignes supprimées."""
        count = self.fortunes.clear()
        log.warning("fortunes_cleared", count=count)
        return count

    def export_csv(self) -> str:
        """Export CSV de toutes les fortunes, plus récentes d'abord."""
        return records_to_csv(self.fortunes.all())

    def analytics(self, now=None) -> FortuneStats:
        """Statistiques agrégées sur toutes les fortunes."""
        return compute_stats(self.fortunes.all(), now=now)

    # --- mot de passe ---

    def _password_hash(self) -> str:
        stored = self.admin_config.get_password_hash()
        if stored:
            return stored
        if self.bootstrap_hash:
            return self.bootstrap_hash
        if self.bootstrap_password:
            hashed = hash_password(self.bootstrap_password)
            self.admin_config.set_password_hash(hashed)
            log.info("admin_password_initialized")
            return hashed
        raise AdminPasswordNotConfigured("no admin password configured")

    def verify_password(self, password: str) -> bool:
        """Vérifie le mot de passe administrateur."""
        return verify_password(password, self._password_hash())

    def change_password(self, current: str, new: str) -> None:
        """Remplace le mot de passe administrateur après vérification de l'actuel.

        Raises:
            PasswordPolicyError: nouveau mot de passe trop court.
            InvalidPasswordError: mot de passe actuel incorrect.
        """
        if len(new) < self.password_min_length:
            raise PasswordPolicyError(
                f"new password must be at least {self.password_min_length} characters"
            )
        if not self.verify_password(current):
            raise InvalidPasswordError("current password incorrect")
        self.admin_config.set_password_hash(hash_password(new))
        log.info("admin_password_changed")
