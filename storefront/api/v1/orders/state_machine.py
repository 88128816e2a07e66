"""
Order state machine for managing order status transitions
"""

from typing import Dict, List, Set
from storefront.models.order import OrderStatus

class OrderStateMachine:
    """
    Manages valid order status transitions
    
    pending -> processing | cancelled
    processing -> shipped | cancelled
    shipped -> delivered
    delivered and cancelled are terminal
    """
    
    def __init__(self):
        self.transitions: Dict[OrderStatus, Set[OrderStatus]] = {
            OrderStatus.PENDING: {
                OrderStatus.PROCESSING,
                OrderStatus.CANCELLED
            },
            OrderStatus.PROCESSING: {
                OrderStatus.SHIPPED,
                OrderStatus.CANCELLED
            },
            OrderStatus.SHIPPED: {
                OrderStatus.DELIVERED
            },
            OrderStatus.DELIVERED: set(),
            OrderStatus.CANCELLED: set()
        }
    
    def can_transition(
        self,
        current_status: OrderStatus,
        new_status: OrderStatus
    ) -> bool:
        """
        Check if transition is valid
        
        Args:
            current_status: Current order status
            new_status: Desired new status
            
        Returns:
            True if transition is allowed
        """
        return new_status in self.transitions.get(current_status, set())
    
    def get_valid_transitions(self, current_status: OrderStatus) -> List[OrderStatus]:
        """Valid next statuses, in declaration order"""
        allowed = self.transitions.get(current_status, set())
        return [status for status in OrderStatus if status in allowed]
    
    def is_terminal_state(self, status: OrderStatus) -> bool:
        return len(self.transitions.get(status, set())) == 0
    
    def is_cancellable(self, status: OrderStatus) -> bool:
        """Check if order can be cancelled in current status"""
        return OrderStatus.CANCELLED in self.transitions.get(status, set())
    
    def cancellable_statuses(self) -> List[OrderStatus]:
        return [status for status in OrderStatus if self.is_cancellable(status)]
