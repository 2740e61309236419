"""
Management command to create sample data for trying out the API.

Usage:
    python manage.py create_sample_data
    python manage.py create_sample_data --clear

This creates:
- 1 franchisor with 2 franchisees (15% and 12% commission)
- 3 establishments
- 1 login per role
- Cards funded and spent through the ledger processor
- Card requests in several stages
- Display units in stock and installed
"""

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.accounts.models import User, UserRole
from apps.accounts.scope import scope_for
from apps.audit.models import AuditLog
from apps.card_requests.models import CardRequest, RequestStatus
from apps.card_requests.services import create_request, update_request
from apps.cards.models import Card
from apps.displays.models import Display, UnitType
from apps.displays.services import create_display
from apps.franchises.models import Establishment, ExternalLinkage, Franchisee, Franchisor
from apps.ledger.models import Commission, Transaction
from apps.ledger.services import LedgerProcessor

PASSWORD = 'password123'


class Command(BaseCommand):
    help = 'Create a sample franchise network for trying out the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new sample data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()
        elif Franchisor.objects.exists():
            self.stdout.write(self.style.WARNING('Data already exists, use --clear to recreate it.'))
            return

        self.stdout.write('Creating sample data...')

        network = self.create_network()
        users = self.create_users(network)
        self.create_cards(network, users)
        self.create_requests(network, users)
        self.create_displays(network, users)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        for user in users.values():
            self.stdout.write(f'  {user.email} / {PASSWORD} ({user.role})')

    def clear_data(self):
        """Clear all data from the database, dependents first."""
        AuditLog.objects.all().delete()
        Commission.objects.all().delete()
        Transaction.objects.all().delete()
        Card.objects.all().delete()
        CardRequest.objects.all().delete()
        Display.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()
        Establishment.objects.all().delete()
        Franchisee.objects.all().delete()
        Franchisor.objects.all().delete()

    def create_network(self):
        """Create the franchisor, franchisees and establishments."""
        self.stdout.write('  Creating franchise network...')

        franchisor = Franchisor.objects.create(
            name='ValeLocal Brasil',
            cnpj='12.345.678/0001-90',
            email='contato@valelocal.example',
        )
        sao_paulo = Franchisee.objects.create(
            franchisor=franchisor,
            name='ValeLocal São Paulo',
            cnpj='98.765.432/0001-10',
            email='saopaulo@valelocal.example',
            phone='11888888888',
            region='São Paulo - Capital',
            commission_rate=Decimal('15.00'),
            external_linkage=ExternalLinkage.UNLINKED,
        )
        rio = Franchisee.objects.create(
            franchisor=franchisor,
            name='ValeLocal Rio de Janeiro',
            cnpj='11.222.333/0001-44',
            email='rj@valelocal.example',
            phone='21777777777',
            region='Rio de Janeiro - Zona Sul',
            commission_rate=Decimal('12.00'),
            external_linkage=ExternalLinkage.UNLINKED,
        )

        establishments_data = [
            (sao_paulo, 'Padaria Central', '55.666.777/0001-88', 'Alimentação', 'Rua das Flores, 123'),
            (sao_paulo, 'Farmácia Saúde', '44.555.666/0001-77', 'Farmácia', 'Av. Brasil, 456'),
            (rio, 'Supermercado Economia', '33.444.555/0001-66', 'Supermercado', 'Rua da Praia, 789'),
        ]
        establishments = []
        for franchisee, name, cnpj, category, address in establishments_data:
            establishments.append(Establishment.objects.create(
                franchisee=franchisee,
                name=name,
                cnpj=cnpj,
                email=f"contato@{name.split()[0].lower()}.example",
                category=category,
                address=address,
                external_linkage=ExternalLinkage.UNLINKED,
            ))

        return {
            'franchisor': franchisor,
            'franchisees': [sao_paulo, rio],
            'establishments': establishments,
        }

    def create_users(self, network):
        """Create one login per role."""
        self.stdout.write('  Creating users...')

        sao_paulo = network['franchisees'][0]
        bakery = network['establishments'][0]

        return {
            'franchisor': User.objects.create_user(
                email='admin@valelocal.example',
                password=PASSWORD,
                role=UserRole.FRANCHISOR,
                franchisor=network['franchisor'],
                full_name='Network Admin',
            ),
            'franchisee': User.objects.create_user(
                email='gerente@saopaulo.example',
                password=PASSWORD,
                role=UserRole.FRANCHISEE,
                franchisee=sao_paulo,
                full_name='Gerente São Paulo',
            ),
            'establishment': User.objects.create_user(
                email='caixa@padaria.example',
                password=PASSWORD,
                role=UserRole.ESTABLISHMENT,
                establishment=bakery,
                full_name='Caixa Padaria',
            ),
        }

    def create_cards(self, network, users):
        """Create cards and move value through the ledger processor."""
        self.stdout.write('  Creating cards and transactions...')

        processor = LedgerProcessor()
        actor = users['franchisor']
        scope = scope_for(actor)

        # (franchisee index, establishment index, recharge, usages)
        cards_data = [
            (0, 0, '50.00', ['30.00']),
            (0, 0, '20.00', ['20.00']),
            (0, 1, '100.00', ['12.50', '7.50']),
            (1, 2, '80.00', ['25.00']),
            (1, None, None, []),
        ]
        for number, (franchisee_index, establishment_index, recharge, usages) in enumerate(cards_data, start=1):
            code = f'VL{number:06d}'
            card = Card.objects.create(
                code=code,
                qr_code=f'https://valelocal.example/qr/{code}',
                franchisee=network['franchisees'][franchisee_index],
            )
            if recharge is None:
                continue
            establishment_id = network['establishments'][establishment_index].id
            processor.recharge(
                card_id=card.id, amount=recharge, actor=actor,
                scope=scope, establishment_id=establishment_id,
            )
            for amount in usages:
                processor.use(
                    card_id=card.id, amount=amount, actor=actor,
                    scope=scope, establishment_id=establishment_id,
                )

    def create_requests(self, network, users):
        """Create card requests at different stages."""
        self.stdout.write('  Creating card requests...')

        manager = users['franchisor']
        manager_scope = scope_for(manager)
        cashier = users['establishment']

        create_request(actor=cashier, scope=scope_for(cashier), quantity=50, notes='Reposição mensal')

        stages = [
            [RequestStatus.APPROVED],
            [RequestStatus.APPROVED, RequestStatus.SHIPPED, RequestStatus.DELIVERED],
        ]
        for establishment, statuses in zip(network['establishments'][1:], stages):
            card_request = create_request(
                actor=manager, scope=manager_scope, quantity=100, establishment_id=establishment.id,
            )
            for status in statuses:
                update_request(request_id=card_request.id, actor=manager, scope=manager_scope, status=status)

    def create_displays(self, network, users):
        """Create display units in stock and installed."""
        self.stdout.write('  Creating displays...')

        actor = users['franchisor']
        scope = scope_for(actor)

        for establishment in network['establishments']:
            create_display(
                actor=actor, scope=scope, unit_type=UnitType.COUNTER,
                franchisee_id=establishment.franchisee_id, establishment_id=establishment.id,
            )
        for franchisee in network['franchisees']:
            create_display(actor=actor, scope=scope, unit_type=UnitType.WALL, franchisee_id=franchisee.id)
